"""API routes."""

from canonical_redirect.routes.health import router as health_router
from canonical_redirect.routes.pages import router as pages_router

__all__ = ["health_router", "pages_router"]

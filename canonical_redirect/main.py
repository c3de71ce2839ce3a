"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from canonical_redirect import __version__
from canonical_redirect.config import settings
from canonical_redirect.exemptions import ExemptionRegistry
from canonical_redirect.logging import configure_logging, get_logger
from canonical_redirect.middleware import CanonicalUrlMiddleware
from canonical_redirect.models.canonical import CanonicalizationOptions
from canonical_redirect.routes import health_router, pages_router
from canonical_redirect.tracing import init_tracing, instrument_fastapi

# Initialize structured logging first (before any logging calls)
configure_logging()

init_tracing()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager."""
    logger = get_logger(__name__)
    logger.info(
        "Canonical redirect service starting",
        log_level=settings.log_level,
        append_trailing_slash=settings.append_trailing_slash,
        lowercase_urls=settings.lowercase_urls,
        otel_enabled=settings.otel_tracing_enabled,
    )
    yield


def create_app(
    options: CanonicalizationOptions | None = None,
    registry: ExemptionRegistry | None = None,
) -> FastAPI:
    """
    Create the demo application.

    Parameters
    ----------
    options : CanonicalizationOptions | None
        Canonical URL rules. Defaults to the values from settings.
    registry : ExemptionRegistry | None
        Exemptions for endpoints that cannot be decorated.

    Returns
    -------
    FastAPI
        Application with the canonical URL middleware installed.
    """
    app = FastAPI(
        title="Canonical Redirect",
        description="Permanent redirects to canonical URLs for SEO",
        version=__version__,
        lifespan=lifespan,
    )

    instrument_fastapi(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Added last, so it is the outermost middleware
    app.add_middleware(CanonicalUrlMiddleware, options=options, registry=registry)

    app.include_router(health_router, tags=["health"])
    app.include_router(pages_router, tags=["pages"])

    return app


app = create_app()


def main() -> None:
    """Run the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "canonical_redirect.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_config=None,  # Use our structlog configuration
    )


if __name__ == "__main__":
    main()

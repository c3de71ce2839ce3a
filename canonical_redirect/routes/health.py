"""Health check routes."""

from fastapi import APIRouter

from canonical_redirect.exemptions import no_trailing_slash

router = APIRouter()


@router.get("/health")
@no_trailing_slash
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}

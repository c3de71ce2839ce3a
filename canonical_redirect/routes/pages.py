"""Demo pages served behind the canonical URL middleware."""

from fastapi import APIRouter
from pydantic import BaseModel

from canonical_redirect.exemptions import no_lowercase_query_string

router = APIRouter()


class PageResponse(BaseModel):
    """Page response model."""

    page: str


class SearchResponse(BaseModel):
    """Search response model."""

    query: str


@router.get("/")
async def home() -> PageResponse:
    """Home page. Canonical with or without a trailing slash."""
    return PageResponse(page="home")


@router.get("/about")
async def about() -> PageResponse:
    """About page."""
    return PageResponse(page="about")


@router.get("/search")
@no_lowercase_query_string
async def search(q: str = "") -> SearchResponse:
    """
    Echo the search query.

    Search terms are case sensitive, so the query string keeps its case.
    """
    return SearchResponse(query=q)

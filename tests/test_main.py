"""Tests for the demo application."""

from fastapi.testclient import TestClient

from canonical_redirect.main import create_app
from canonical_redirect.models.canonical import CanonicalizationOptions


def test_health_is_exempt_from_trailing_slash() -> None:
    """Serve /health without a trailing slash even when slashes are appended."""
    app = create_app(CanonicalizationOptions(append_trailing_slash=True, lowercase_urls=True))
    response = TestClient(app).get("/health", follow_redirects=False)
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_pages() -> None:
    """Redirect mixed-case page URLs and serve canonical ones."""
    client = TestClient(create_app(CanonicalizationOptions()))

    response = client.get("/About/", follow_redirects=False)
    assert response.status_code == 301
    assert response.headers["location"] == "http://testserver/about"

    response = client.get("/about", follow_redirects=False)
    assert response.json() == {"page": "about"}

    response = client.get("/", follow_redirects=False)
    assert response.json() == {"page": "home"}


def test_search_keeps_query_case() -> None:
    """Pass case-sensitive search terms through unchanged."""
    client = TestClient(create_app(CanonicalizationOptions()))
    response = client.get("/search?q=FastAPI", follow_redirects=False)
    assert response.status_code == 200
    assert response.json() == {"query": "FastAPI"}

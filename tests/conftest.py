"""
Pytest configuration and fixtures for canonical redirect tests.
"""

from collections.abc import Callable

import pytest

from canonical_redirect.models.canonical import CanonicalizationOptions, RequestView

RequestFactory = Callable[..., RequestView]


@pytest.fixture
def append_slash() -> CanonicalizationOptions:
    """Rules that append a trailing slash and lowercase URLs."""
    return CanonicalizationOptions(append_trailing_slash=True, lowercase_urls=True)


@pytest.fixture
def strip_slash() -> CanonicalizationOptions:
    """Rules that strip trailing slashes and lowercase URLs."""
    return CanonicalizationOptions(append_trailing_slash=False, lowercase_urls=True)


@pytest.fixture
def make_request() -> RequestFactory:
    """
    Return a factory for GET request views on http://example.com.
    """

    def factory(path: str, query_string: str = "", **kwargs: str) -> RequestView:
        kwargs.setdefault("host", "example.com")
        return RequestView(path=path, query_string=query_string, **kwargs)

    return factory

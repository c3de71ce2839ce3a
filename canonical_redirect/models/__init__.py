"""Pydantic models for canonical URL decisions."""

from canonical_redirect.models.canonical import (
    PERMANENT_REDIRECT,
    Canonical,
    CanonicalizationOptions,
    Decision,
    Exemptions,
    Redirect,
    RequestView,
)

__all__ = [
    "PERMANENT_REDIRECT",
    "Canonical",
    "CanonicalizationOptions",
    "Decision",
    "Exemptions",
    "Redirect",
    "RequestView",
]

"""Pydantic models for canonical URL decisions."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PERMANENT_REDIRECT = 301


class RequestView(BaseModel):
    """Read-only snapshot of the parts of a request that affect its canonical form."""

    model_config = ConfigDict(frozen=True)

    method: str = Field(default="GET", description="HTTP method")
    path: str = Field(
        description="Request path as sent, percent escapes intact. May be empty or '/'"
    )
    query_string: str = Field(
        default="", description="Query string including the leading '?', or empty"
    )
    scheme: str = Field(default="http", description="URL scheme of the request")
    host: str = Field(
        default="",
        description="Host with optional port. Empty produces a relative redirect target.",
    )
    path_base: str = Field(
        default="", description="Mount prefix the application is served under"
    )


class CanonicalizationOptions(BaseModel):
    """Site-wide canonical URL rules."""

    model_config = ConfigDict(frozen=True)

    append_trailing_slash: bool = Field(
        default=False,
        description="Canonical URLs end with '/' when True, never when False (root excepted)",
    )
    lowercase_urls: bool = Field(
        default=True, description="Canonical path and query string are lowercase"
    )


class Exemptions(BaseModel):
    """Per-endpoint switches that suppress individual rules."""

    model_config = ConfigDict(frozen=True)

    no_trailing_slash_rule: bool = False
    no_lowercase_query_string_rule: bool = False


class Canonical(BaseModel):
    """The request URL is already canonical."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["canonical"] = "canonical"


class Redirect(BaseModel):
    """The request URL must be permanently redirected to ``canonical_url``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["redirect"] = "redirect"
    canonical_url: str = Field(description="Target URL for the Location header")
    path: str = Field(description="Canonical path")
    query_string: str = Field(default="", description="Canonical query string")
    status_code: int = PERMANENT_REDIRECT


Decision = Canonical | Redirect

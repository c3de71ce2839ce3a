"""
Canonical URL decision logic.

Search engines treat URLs that differ only in case or in a trailing slash
as different pages. ``evaluate`` decides whether a GET request is already
at its canonical address and, if not, where it should be permanently
redirected. The function is pure: it never touches the request or the
response, so it can be shared by any number of concurrent requests.

@module canonical_redirect/canonicalizer
"""

import re
from urllib.parse import quote

from canonical_redirect.models.canonical import (
    Canonical,
    CanonicalizationOptions,
    Decision,
    Exemptions,
    Redirect,
    RequestView,
)

SLASH = "/"

# Characters allowed verbatim in a URL path (RFC 3986 pchar plus "/").
PATH_SAFE = "/:@!$&'()*+,;="

_ESCAPE = re.compile(r"(%[0-9A-Fa-f]{2})")


def lowercase(value: str) -> str:
    """
    Lowercase ``value`` while leaving percent escapes as they are.

    ``%2F`` stays ``%2F``, so an encoded character never changes identity.
    """
    return "".join(
        part if _ESCAPE.fullmatch(part) else part.lower() for part in _ESCAPE.split(value)
    )


def build_url(request: RequestView, path: str, query_string: str) -> str:
    """
    Compose the URL for ``path`` and ``query_string`` on the request's origin.

    Parameters
    ----------
    request : RequestView
        Source of scheme, host and path base.
    path : str
        Request path as it appears in the URL. Characters that are not
        legal in a path are encoded, existing escapes are kept.
    query_string : str
        Query string including its leading "?", or empty.

    Returns
    -------
    str
        Absolute URL, or a relative reference when the request has no host.
    """
    # "%" is kept so existing escapes pass through untouched
    full_path = quote(
        request.path_base + path, safe=PATH_SAFE + "%", errors="surrogateescape"
    ) or SLASH
    if not request.host:
        return f"{full_path}{query_string}"
    return f"{request.scheme}://{request.host}{full_path}{query_string}"


def evaluate(
    request: RequestView,
    options: CanonicalizationOptions,
    exemptions: Exemptions | None = None,
) -> Decision:
    """
    Determine whether the request URL is canonical.

    Only GET requests should be passed in; callers filter other methods.
    All rules are applied together, so a URL that breaks several of them
    gets a single redirect carrying every correction.

    Parameters
    ----------
    request : RequestView
        The inbound request.
    options : CanonicalizationOptions
        Site-wide trailing slash and casing rules.
    exemptions : Exemptions | None
        Rules suppressed for the routed endpoint.

    Returns
    -------
    Decision
        ``Canonical`` when nothing needs fixing, otherwise ``Redirect``.
    """
    if exemptions is None:
        exemptions = Exemptions()

    path = request.path
    query_string = request.query_string
    is_canonical = True

    # The home page is the same page with or without a trailing slash.
    has_path = len(path) > 1

    if has_path:
        has_trailing_slash = path.endswith(SLASH)
        if options.append_trailing_slash:
            if not has_trailing_slash and not exemptions.no_trailing_slash_rule:
                path = path + SLASH
                is_canonical = False
        elif has_trailing_slash:
            # Stripping ignores the exemption flag.
            path = path.rstrip(SLASH)
            is_canonical = False

    # The path check is gated by the trailing slash exemption, not a flag of its own.
    if (
        (has_path or query_string)
        and options.lowercase_urls
        and not exemptions.no_trailing_slash_rule
    ):
        lowered = lowercase(path)
        if lowered != path:
            path = lowered
            is_canonical = False

        if query_string and not exemptions.no_lowercase_query_string_rule:
            lowered = lowercase(query_string)
            if lowered != query_string:
                query_string = lowered
                is_canonical = False

    if is_canonical:
        return Canonical()

    return Redirect(
        canonical_url=build_url(request, path, query_string),
        path=path,
        query_string=query_string,
    )

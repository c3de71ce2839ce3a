"""
Middleware that redirects GET requests to their canonical URL.

@module canonical_redirect/middleware
"""

from urllib.parse import quote

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from canonical_redirect.canonicalizer import PATH_SAFE, evaluate
from canonical_redirect.config import settings
from canonical_redirect.exemptions import ExemptionRegistry, exemptions_for, resolve_endpoint
from canonical_redirect.logging import get_logger
from canonical_redirect.models.canonical import (
    Canonical,
    CanonicalizationOptions,
    Redirect,
    RequestView,
)
from canonical_redirect.tracing import record_decision

logger = get_logger(__name__)


def strip_root_path(path: str, root_path: str) -> str:
    """
    Return ``path`` relative to ``root_path``.

    The prefix is only removed at a segment boundary, so ``/apple`` is not
    treated as being under ``/app``.
    """
    if not root_path or not path.startswith(root_path):
        return path
    if path == root_path:
        return ""
    if path[len(root_path)] == "/":
        return path[len(root_path):]
    return path


def request_view(request: Request) -> RequestView:
    """
    Snapshot the parts of a Starlette request the canonicalizer needs.

    The path comes from ``raw_path`` so encoded characters such as ``%2F``
    survive into the redirect target. It is taken relative to ``root_path``
    so that a mount prefix is never lowercased or stripped.
    """
    root_path: str = request.scope.get("root_path", "")
    raw_path: bytes | None = request.scope.get("raw_path")
    if raw_path is not None:
        path = strip_root_path(
            raw_path.decode("utf-8", errors="surrogateescape"),
            quote(root_path, safe=PATH_SAFE),
        )
    else:
        path = quote(strip_root_path(request.scope["path"], root_path), safe=PATH_SAFE)

    query = request.scope.get("query_string", b"").decode("latin-1")

    return RequestView(
        method=request.method,
        path=path,
        query_string=f"?{query}" if query else "",
        scheme=request.url.scheme,
        host=request.headers.get("host", ""),
        path_base=root_path,
    )


class CanonicalUrlMiddleware(BaseHTTPMiddleware):
    """Permanently redirect non-canonical GET requests before routing."""

    def __init__(
        self,
        app: ASGIApp,
        options: CanonicalizationOptions | None = None,
        registry: ExemptionRegistry | None = None,
    ) -> None:
        """
        Initialize the middleware.

        Parameters
        ----------
        app : ASGIApp
            Downstream application.
        options : CanonicalizationOptions | None
            Canonical URL rules. Defaults to the values from settings.
        registry : ExemptionRegistry | None
            Exemptions for endpoints that cannot be decorated.
        """
        super().__init__(app)
        self.options = options or settings.canonicalization_options()
        self.registry = registry or ExemptionRegistry()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Redirect when the URL is not canonical, otherwise continue."""
        if request.method != "GET":
            return await call_next(request)

        routes = getattr(request.scope.get("app"), "routes", [])
        endpoint = resolve_endpoint(routes, request.scope)
        view = request_view(request)
        decision = evaluate(view, self.options, exemptions_for(endpoint, self.registry))
        record_decision(decision)

        if isinstance(decision, Canonical):
            return await call_next(request)

        logger.info(
            "Redirecting to canonical URL",
            path=view.path,
            query_string=view.query_string,
            canonical_url=decision.canonical_url,
        )
        return self.handle_non_canonical(request, decision)

    def handle_non_canonical(self, request: Request, decision: Redirect) -> Response:
        """
        Build the response for a non-canonical request.

        Parameters
        ----------
        request : Request
            The non-canonical request.
        decision : Redirect
            Where the request belongs.

        Returns
        -------
        Response
            A 301 response with the Location header set.
        """
        return RedirectResponse(url=decision.canonical_url, status_code=decision.status_code)

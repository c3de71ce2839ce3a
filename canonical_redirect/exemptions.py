"""
Per-route exemptions from the canonical URL rules.

Endpoints opt out of individual rules either with a decorator or through an
``ExemptionRegistry`` entry, for endpoints the application cannot decorate.

Examples
--------
>>> @router.get("/health")
... @no_trailing_slash
... async def health_check() -> dict: ...

@module canonical_redirect/exemptions
"""

from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from typing import Any, TypeVar

from fastapi.routing import iter_route_contexts
from starlette.routing import BaseRoute, Match
from starlette.types import Scope

from canonical_redirect.models.canonical import Exemptions

EXEMPTIONS_ATTRIBUTE = "__canonical_exemptions__"

F = TypeVar("F", bound=Callable[..., Any])


class ExemptionFlag(str, Enum):
    """Canonical URL rules an endpoint can opt out of."""

    NO_TRAILING_SLASH = "no_trailing_slash"
    NO_LOWERCASE_QUERY_STRING = "no_lowercase_query_string"


def exempt(*flags: ExemptionFlag) -> Callable[[F], F]:
    """
    Mark an endpoint as exempt from the given rules.

    Markers stack when the decorator is applied more than once.
    """

    def decorator(endpoint: F) -> F:
        existing: frozenset[ExemptionFlag] = getattr(
            endpoint, EXEMPTIONS_ATTRIBUTE, frozenset()
        )
        setattr(endpoint, EXEMPTIONS_ATTRIBUTE, existing | frozenset(flags))
        return endpoint

    return decorator


def no_trailing_slash(endpoint: F) -> F:
    """Exempt an endpoint from trailing slash appending and path lowercasing."""
    return exempt(ExemptionFlag.NO_TRAILING_SLASH)(endpoint)


def no_lowercase_query_string(endpoint: F) -> F:
    """Exempt an endpoint from query string lowercasing."""
    return exempt(ExemptionFlag.NO_LOWERCASE_QUERY_STRING)(endpoint)


class ExemptionRegistry:
    """Explicit mapping from endpoint to exemption flags."""

    def __init__(self) -> None:
        self._flags: dict[Callable[..., Any], frozenset[ExemptionFlag]] = {}

    def register(self, endpoint: Callable[..., Any], *flags: ExemptionFlag) -> None:
        """
        Add exemption flags for an endpoint.

        Parameters
        ----------
        endpoint : Callable[..., Any]
            Route endpoint as stored on the Starlette route.
        *flags : ExemptionFlag
            Rules to suppress for this endpoint.
        """
        self._flags[endpoint] = self._flags.get(endpoint, frozenset()) | frozenset(flags)

    def flags_for(self, endpoint: Callable[..., Any] | None) -> frozenset[ExemptionFlag]:
        """Return registered and decorator flags for an endpoint."""
        if endpoint is None:
            return frozenset()
        marked: frozenset[ExemptionFlag] = getattr(
            endpoint, EXEMPTIONS_ATTRIBUTE, frozenset()
        )
        return self._flags.get(endpoint, frozenset()) | marked

    def __contains__(self, endpoint: object) -> bool:
        return endpoint in self._flags

    def __len__(self) -> int:
        return len(self._flags)


def to_exemptions(flags: Iterable[ExemptionFlag]) -> Exemptions:
    """Convert a flag set into the booleans the canonicalizer expects."""
    flag_set = frozenset(flags)
    return Exemptions(
        no_trailing_slash_rule=ExemptionFlag.NO_TRAILING_SLASH in flag_set,
        no_lowercase_query_string_rule=ExemptionFlag.NO_LOWERCASE_QUERY_STRING in flag_set,
    )


def exemptions_for(
    endpoint: Callable[..., Any] | None,
    registry: ExemptionRegistry | None = None,
) -> Exemptions:
    """
    Look up the exemptions that apply to an endpoint.

    Parameters
    ----------
    endpoint : Callable[..., Any] | None
        Routed endpoint, or None when no route matched.
    registry : ExemptionRegistry | None
        Additional registered exemptions.

    Returns
    -------
    Exemptions
        Flags for the canonicalizer. Unrouted requests get none.
    """
    if registry is None:
        registry = ExemptionRegistry()
    return to_exemptions(registry.flags_for(endpoint))


def resolve_endpoint(routes: Sequence[BaseRoute], scope: Scope) -> Callable[..., Any] | None:
    """
    Find the endpoint a request will be routed to.

    Routes are matched in registration order through FastAPI's route
    contexts, so routers added with ``include_router`` are matched with
    their prefixes applied. A matching route that carries child routes
    (``Mount``, ``Host``) is searched recursively, and, as in the router,
    no later sibling is considered after it. A route that matches the path
    but not the method is used only when no route matches fully.

    Parameters
    ----------
    routes : Sequence[BaseRoute]
        Application routes, in registration order.
    scope : Scope
        ASGI scope of the request.

    Returns
    -------
    Callable[..., Any] | None
        The matched endpoint, or None.
    """
    partial: Callable[..., Any] | None = None

    for route in iter_route_contexts(routes):
        match, child_scope = route.matches(scope)
        if match == Match.NONE:
            continue

        child_routes = getattr(route, "routes", None)
        if child_routes:
            return resolve_endpoint(child_routes, {**scope, **child_scope})

        endpoint = child_scope.get("endpoint") or route.endpoint
        if match == Match.FULL:
            return endpoint
        if partial is None:
            partial = endpoint

    return partial

"""Composed routing unit.

:class:`RouteFunction` bundles a predicate, an ordered filter chain and a
terminal handler. The chain is built once in the constructor, wrapping the
handler from the last filter to the first, so the first filter runs first on
the way in and last on the way out.

Lookup and execution
--------------------
- ``route(request)`` returns the composed handler when the predicate accepts
  the request, otherwise None.
- ``route_function(request)`` runs it and returns the response, or None when
  the route does not match.

``dispatch(routes, request)`` tries routes in order and returns the response
of the first one that matches.

Instances hold no per-request state and can be shared across threads.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import httpx

from .functions import FilterFunction, HandlerFunction, RequestPredicate
from .request import ServerRequest

__all__ = ["RouteFunction", "dispatch"]


def _link(filter_function: FilterFunction, call_next: HandlerFunction) -> HandlerFunction:
    def linked(request: ServerRequest) -> httpx.Response:
        return filter_function(request, call_next)

    return linked


class RouteFunction:
    """Immutable (predicate, filters, handler) bundle for one route."""

    __slots__ = ("route_id", "predicate", "filters", "handler", "metadata", "_chain")

    def __init__(
        self,
        route_id: str,
        predicate: RequestPredicate,
        filters: Iterable[FilterFunction],
        handler: HandlerFunction,
        *,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        self.route_id = route_id
        self.predicate = predicate
        self.filters = tuple(filters)
        self.handler = handler
        self.metadata = dict(metadata or {})
        chain = handler
        for filter_function in reversed(self.filters):
            chain = _link(filter_function, chain)
        self._chain = chain

    def route(self, request: ServerRequest) -> HandlerFunction | None:
        """Return the composed handler if the predicate accepts ``request``."""
        if not self.predicate(request):
            return None
        return self._chain

    def __call__(self, request: ServerRequest) -> httpx.Response | None:
        handler = self.route(request)
        if handler is None:
            return None
        return handler(request)

    def __repr__(self) -> str:
        return (
            f"<RouteFunction {self.route_id!r} predicate={self.predicate.description} "
            f"filters={len(self.filters)}>"
        )


def dispatch(routes: Iterable[RouteFunction], request: ServerRequest) -> httpx.Response | None:
    """Return the response of the first route matching ``request``."""
    for route_function in routes:
        handler = route_function.route(request)
        if handler is not None:
            return handler(request)
    return None

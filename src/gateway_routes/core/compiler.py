"""Route compiler for Gateway Routes.

:class:`RouteCompiler` turns a :class:`RouteProperties` into a
:class:`RouteFunction`. It owns one :class:`OperationCatalog` per family,
built once from the provider instances given to the constructor (default:
one instance of every registered provider).

Per-route algorithm
-------------------
1. A head filter stores the route destination and id in
   ``request.attributes`` before anything else runs.
2. The destination scheme, lower-cased, names the handler operation. Schemes
   listed in ``uri_arg_schemes`` receive the full URI as a ``uri`` argument.
   The result is a handler function, ``HandlerOnly`` or
   ``HandlerWithFilters``; contributed filters follow the head filter.
3. Each predicate is resolved against the predicate catalog and the results
   are folded with AND in configuration order. No predicates means the route
   matches every request.
4. Each filter is resolved against the filter catalog and appended in
   configuration order.
5. The pieces are assembled into a RouteFunction.

Any resolution failure raises; ``compile_all`` lets it propagate so a set of
routes is compiled completely or not at all.

Example::

    compiler = RouteCompiler()
    routes = compiler.compile_all(GatewayProperties.model_validate(config))
    response = dispatch(routes.values(), request)
    compiler.close()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

import httpx
from genro_toolbox.typeutils import safe_is_instance

from gateway_routes.exceptions import (
    GatewayError,
    HandlerShapeError,
    InvalidOperationResult,
    OperationNotFound,
    UnresolvableScheme,
)

from .arguments import RawArgs
from .catalog import OperationCatalog, normalize_name
from .functions import (
    FilterFunction,
    HandlerOnly,
    HandlerResult,
    HandlerWithFilters,
    RequestPredicate,
    all_of,
)
from .invoker import OperationInvoker
from .matcher import find_operation
from .properties import GatewayProperties, RouteProperties
from .provider import FAMILIES, OperationProvider, default_providers
from .request import GATEWAY_REQUEST_URL_ATTR, GATEWAY_ROUTE_ID_ATTR, ServerRequest
from .route_function import RouteFunction

__all__ = ["RouteCompiler"]

logger = logging.getLogger(__name__)


def _stamp_destination(route_id: str, url: httpx.URL) -> FilterFunction:
    def stamp_destination(request: ServerRequest, call_next: Callable) -> httpx.Response:
        request.attributes[GATEWAY_REQUEST_URL_ATTR] = url
        request.attributes[GATEWAY_ROUTE_ID_ATTR] = route_id
        return call_next(request)

    return stamp_destination


class RouteCompiler:
    """Compile route descriptions into routing units.

    Args:
        providers: Provider instances to build the catalogs from. Defaults to
            one instance of each registered provider.
        uri_arg_schemes: Schemes whose handler operation takes the route URI
            as its ``uri`` argument.
        invoker: Invoker used for every operation call.
    """

    __slots__ = ("providers", "catalogs", "uri_arg_schemes", "invoker")

    def __init__(
        self,
        providers: Iterable[OperationProvider] | None = None,
        *,
        uri_arg_schemes: Iterable[str] = ("lb",),
        invoker: OperationInvoker | None = None,
    ) -> None:
        self.providers = tuple(default_providers() if providers is None else providers)
        self.catalogs: dict[str, OperationCatalog] = {
            family: OperationCatalog.discover(family, self.providers) for family in FAMILIES
        }
        self.uri_arg_schemes = frozenset(scheme.lower() for scheme in uri_arg_schemes)
        self.invoker = invoker or OperationInvoker()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def compile(self, route: RouteProperties, route_id: str | None = None) -> RouteFunction:
        """Compile one route.

        Raises:
            UnresolvableScheme: No handler operation for the URI scheme.
            HandlerShapeError: The handler operation returned an unusable value.
            OperationNotFound: A predicate or filter has no matching overload.
            ArgumentConversionError: An argument cannot be coerced.
        """
        route_id = route_id or route.id
        logger.debug("Creating route for %s: %s", route_id, route)
        try:
            return self._compile(route, route_id)
        except GatewayError as exc:
            logger.error("Route %r failed to compile: %s", route_id, exc)
            raise

    def compile_all(self, properties: GatewayProperties) -> dict[str, RouteFunction]:
        """Compile every configured route, keyed by route id, in ``order`` order."""
        return {
            route_id: self.compile(route, route_id) for route_id, route in properties.iter_routes()
        }

    def close(self) -> None:
        """Release the resources held by the providers (HTTP clients...)."""
        for provider in self.providers:
            provider.close()

    # ------------------------------------------------------------------
    # Compilation steps
    # ------------------------------------------------------------------
    def _compile(self, route: RouteProperties, route_id: str) -> RouteFunction:
        filters: list[FilterFunction] = [_stamp_destination(route_id, route.url)]

        result = self._resolve_handler(route)
        filters.extend(result.filters if isinstance(result, HandlerWithFilters) else ())

        predicates: list[RequestPredicate] = []
        for spec in route.predicates:
            predicate = self._translate("predicate", spec.name, spec.args)
            if predicate is None:
                continue
            if not isinstance(predicate, RequestPredicate):
                predicate = RequestPredicate(predicate, str(spec))
            logger.debug("Adding predicate to route %s - %s", route_id, spec)
            predicates.append(predicate)
        predicate = all_of(predicates)
        logger.debug("Combined predicate for route %s - %s", route_id, predicate.description)

        for spec in route.filters:
            filter_function = self._translate("filter", spec.name, spec.args)
            if filter_function is None:
                continue
            logger.debug("Adding filter to route %s - %s", route_id, spec)
            filters.append(filter_function)

        return RouteFunction(route_id, predicate, filters, result.handler, metadata=route.metadata)

    def _resolve_handler(self, route: RouteProperties) -> HandlerResult:
        scheme = route.scheme.lower()
        handler_args: dict[str, str] = {}
        if scheme in self.uri_arg_schemes:
            handler_args["uri"] = route.uri
        operation = find_operation(self.catalogs["handler"], scheme, handler_args)
        if operation is None:
            raise UnresolvableScheme(scheme)
        response = self.invoker.invoke(operation.descriptor, operation.args)
        if safe_is_instance(response, "gateway_routes.core.functions.HandlerWithFilters"):
            return response  # type: ignore[no-any-return]
        if safe_is_instance(response, "gateway_routes.core.functions.HandlerOnly"):
            return response  # type: ignore[no-any-return]
        if callable(response):
            return HandlerOnly(response)
        raise HandlerShapeError(scheme, response)

    def _translate(self, family: str, name: str, args: RawArgs) -> Any:
        operation = find_operation(self.catalogs[family], name, args)
        if operation is None:
            raise OperationNotFound(normalize_name(name), family, args)
        result = self.invoker.invoke(operation.descriptor, operation.args)
        if result is None:
            logger.debug("Operation %s returned no %s, skipped", operation.descriptor.name, family)
            return None
        if not callable(result):
            raise InvalidOperationResult(operation.descriptor.name, result)
        return result

"""Gateway Routes - compile declarative routes into routing functions.

A route description names a destination URI, a list of predicates and a list
of filters, each with textual arguments. The compiler resolves every name
against a catalog of operations exposed by registered providers, coerces the
arguments to the declared parameter types and composes the results into one
``RouteFunction``.

Public exports:
    - ``RouteCompiler``: compiles ``RouteProperties`` / ``GatewayProperties``
    - ``RouteFunction`` / ``dispatch``: compiled routes and first-match dispatch
    - ``OperationProvider`` / ``register_provider`` / ``operation``: custom providers
    - ``ServerRequest``: request seen by predicates, filters and handlers

Built-in providers (handlers, predicates, filters) are auto-registered on
first import.

Example::

    from gateway_routes import GatewayProperties, RouteCompiler, ServerRequest, dispatch

    properties = GatewayProperties.model_validate(
        {
            "routes": [
                {
                    "id": "api",
                    "uri": "http://backend.local:8080",
                    "predicates": ["Path=/api/**"],
                    "filters": ["StripPrefix=1"],
                }
            ]
        }
    )
    routes = RouteCompiler().compile_all(properties)
    response = dispatch(routes.values(), ServerRequest.build("GET", "http://gw/api/users"))
"""

from importlib import import_module

__version__ = "0.1.0"

from .core import (
    ABSENT,
    ALWAYS,
    GATEWAY_REQUEST_URL_ATTR,
    GATEWAY_ROUTE_ID_ATTR,
    PRESERVE_HOST_HEADER_ATTR,
    FilterProperties,
    GatewayProperties,
    HandlerOnly,
    HandlerWithFilters,
    Injected,
    OperationCatalog,
    OperationInvoker,
    OperationProvider,
    PredicateProperties,
    RequestPredicate,
    RouteCompiler,
    RouteFunction,
    RouteProperties,
    ServerRequest,
    dispatch,
    operation,
    register_provider,
)
from .exceptions import (
    ArgumentConversionError,
    CatalogConflict,
    GatewayError,
    HandlerShapeError,
    InvalidOperationResult,
    OperationNotFound,
    UnresolvableScheme,
)

# Import providers to trigger auto-registration (lazy to avoid cycles)
for _provider in ("handlers", "predicates", "filters"):
    import_module(f"{__name__}.providers.{_provider}")
del _provider

__all__ = [
    "ABSENT",
    "ALWAYS",
    "GATEWAY_REQUEST_URL_ATTR",
    "GATEWAY_ROUTE_ID_ATTR",
    "PRESERVE_HOST_HEADER_ATTR",
    "ArgumentConversionError",
    "CatalogConflict",
    "FilterProperties",
    "GatewayError",
    "GatewayProperties",
    "HandlerOnly",
    "HandlerShapeError",
    "HandlerWithFilters",
    "Injected",
    "InvalidOperationResult",
    "OperationCatalog",
    "OperationInvoker",
    "OperationNotFound",
    "OperationProvider",
    "PredicateProperties",
    "RequestPredicate",
    "RouteCompiler",
    "RouteFunction",
    "RouteProperties",
    "ServerRequest",
    "UnresolvableScheme",
    "dispatch",
    "operation",
    "register_provider",
]

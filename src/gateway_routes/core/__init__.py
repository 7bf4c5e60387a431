"""Core runtime aggregator for Gateway Routes.

Exposes the compilation building blocks from a single module.

Public API:
    - ``OperationProvider`` / ``register_provider``: provider registry
    - ``operation`` / ``Injected``: markers for provider methods
    - ``OperationCatalog``: per-family operation index
    - ``OperationInvoker``: argument coercion and invocation
    - ``RouteCompiler``: route description to ``RouteFunction``
    - ``RouteFunction`` / ``dispatch``: composed routing units

Importing this module performs only imports; it does not register providers.
"""

from .catalog import OperationCatalog, OperationDescriptor, ParameterDescriptor
from .compiler import RouteCompiler
from .decorators import ABSENT, Injected, operation
from .functions import (
    ALWAYS,
    HandlerOnly,
    HandlerWithFilters,
    RequestPredicate,
    all_of,
)
from .invoker import OperationInvoker
from .properties import (
    FilterProperties,
    GatewayProperties,
    PredicateProperties,
    RouteProperties,
)
from .provider import (
    OperationProvider,
    available_providers,
    default_providers,
    register_provider,
)
from .request import (
    GATEWAY_REQUEST_URL_ATTR,
    GATEWAY_ROUTE_ID_ATTR,
    PRESERVE_HOST_HEADER_ATTR,
    ServerRequest,
)
from .route_function import RouteFunction, dispatch

__all__ = [
    "ABSENT",
    "ALWAYS",
    "GATEWAY_REQUEST_URL_ATTR",
    "GATEWAY_ROUTE_ID_ATTR",
    "PRESERVE_HOST_HEADER_ATTR",
    "FilterProperties",
    "GatewayProperties",
    "HandlerOnly",
    "HandlerWithFilters",
    "Injected",
    "OperationCatalog",
    "OperationDescriptor",
    "OperationInvoker",
    "OperationProvider",
    "ParameterDescriptor",
    "PredicateProperties",
    "RequestPredicate",
    "RouteCompiler",
    "RouteFunction",
    "RouteProperties",
    "ServerRequest",
    "all_of",
    "available_providers",
    "default_providers",
    "dispatch",
    "operation",
    "register_provider",
]

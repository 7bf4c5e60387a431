# Copyright 2025 Softwell S.r.l. - All Rights Reserved
# SPDX-License-Identifier: Apache-2.0
"""Exceptions for Gateway Routes.

Every error raised while building catalogs or compiling routes derives from
:class:`GatewayError`. Errors raised at request time by predicates, filters or
handlers are not wrapped.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

__all__ = [
    "GatewayError",
    "CatalogConflict",
    "OperationNotFound",
    "UnresolvableScheme",
    "ArgumentConversionError",
    "InvalidOperationResult",
    "HandlerShapeError",
]


class GatewayError(Exception):
    """Base class for route compilation errors."""


class CatalogConflict(GatewayError, ValueError):
    """Raised when two operations of one family cannot be told apart.

    Two registrations conflict when they share the normalized name and the
    same set of matchable parameter names.

    Attributes:
        name: Normalized operation name.
        parameters: Parameter names shared by both registrations.
    """

    def __init__(self, name: str, parameters: Iterable[str]) -> None:
        self.name = name
        self.parameters = tuple(parameters)
        super().__init__(
            f"Operation '{name}' registered twice with parameters {list(self.parameters)}"
        )


class OperationNotFound(GatewayError):
    """Raised when no overload matches a configured predicate or filter.

    Attributes:
        name: Normalized operation name that was looked up.
        kind: Kind of result expected (``"predicate"``, ``"filter"``...).
        arguments: Argument collection as configured.
    """

    def __init__(
        self, name: str, kind: str, arguments: Mapping[str, str] | list[str]
    ) -> None:
        self.name = name
        self.kind = kind
        self.arguments = arguments
        super().__init__(f"Unable to find operation {kind} for {name} with args {arguments}")


class UnresolvableScheme(GatewayError):
    """Raised when no handler operation exists for a destination scheme.

    Attributes:
        scheme: The destination scheme, lower-cased.
    """

    def __init__(self, scheme: str) -> None:
        self.scheme = scheme
        super().__init__(f"Unable to find handler function for scheme: {scheme}")


class ArgumentConversionError(GatewayError, ValueError):
    """Raised when a configured argument cannot be coerced to its declared type.

    Attributes:
        parameter: Name of the parameter being resolved.
        value: The raw configured value.
        operation: Name of the operation being invoked.
    """

    def __init__(self, parameter: str, value: Any, operation: str) -> None:
        self.parameter = parameter
        self.value = value
        self.operation = operation
        super().__init__(
            f"Cannot convert value {value!r} for parameter '{parameter}' of operation '{operation}'"
        )


class InvalidOperationResult(GatewayError, TypeError):
    """Raised when an operation returns something of the wrong shape.

    Attributes:
        operation: Name of the operation.
        result: The offending value.
    """

    def __init__(self, operation: str, result: Any) -> None:
        self.operation = operation
        self.result = result
        super().__init__(f"Operation '{operation}' returned unsupported result {result!r}")


class HandlerShapeError(InvalidOperationResult):
    """Raised when a handler operation returns neither a handler nor a handler result.

    Attributes:
        scheme: The destination scheme being resolved.
    """

    def __init__(self, scheme: str, result: Any) -> None:
        super().__init__(scheme, result)
        self.scheme = scheme
        self.args = (
            f"Unable to find handler function for scheme: {scheme} and response {result!r}",
        )

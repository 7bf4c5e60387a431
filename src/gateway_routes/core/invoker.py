"""Operation invocation with pydantic argument coercion.

:class:`OperationInvoker` calls an :class:`OperationDescriptor` with a
name-keyed map of raw string arguments:

- a supplied value is coerced to the declared annotation with a pydantic
  ``TypeAdapter`` (lax mode, so ``"1"`` becomes ``1`` and ISO strings become
  datetimes). ``str`` and unannotated parameters pass through. Sequence
  annotations accept a comma-separated string (``"GET,POST"``).
- a parameter with no supplied value goes through ``resolve_absent``, which
  returns ``ABSENT`` whatever the declared type.

Every argument is resolved before the operation is called; a coercion failure
raises ``ArgumentConversionError`` and the operation is never invoked. A
declared type pydantic cannot build a validator for fails the same way.
Exceptions raised by the operation itself propagate unchanged.

Example::

    invoker = OperationInvoker()
    predicate = invoker.invoke(descriptor, {"pattern": "/api/**"})
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, get_origin

from genro_toolbox import smartsplit
from pydantic import PydanticUserError, TypeAdapter, ValidationError

from gateway_routes.exceptions import ArgumentConversionError

from .catalog import OperationDescriptor, ParameterDescriptor
from .decorators import ABSENT

__all__ = ["OperationInvoker"]

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset)


class OperationInvoker:
    """Resolve arguments and call operations."""

    __slots__ = ()

    def invoke(self, descriptor: OperationDescriptor, args: Mapping[str, str]) -> Any:
        """Call ``descriptor`` with ``args`` coerced to the declared types.

        Raises:
            ArgumentConversionError: If a value cannot be coerced.
        """
        resolved: dict[str, Any] = {}
        for param in descriptor.parameters:
            if param.name in args:
                resolved[param.name] = self.convert(descriptor, param, args[param.name])
            else:
                resolved[param.name] = self.resolve_absent(param)
        return descriptor.func(**resolved)

    def convert(self, descriptor: OperationDescriptor, param: ParameterDescriptor, value: Any) -> Any:
        """Coerce ``value`` to ``param.annotation``."""
        annotation = param.annotation
        if annotation is str or annotation is Any:
            return value
        candidate = value
        if isinstance(value, str) and get_origin(annotation) in _SEQUENCE_ORIGINS:
            candidate = [chunk for chunk in smartsplit(value, ",") if chunk]
        try:
            return TypeAdapter(annotation).validate_python(candidate)
        except (ValidationError, PydanticUserError) as exc:
            raise ArgumentConversionError(param.name, value, descriptor.name) from exc

    def resolve_absent(self, param: ParameterDescriptor) -> Any:
        """Value for a parameter nobody supplied."""
        return ABSENT

"""Operation catalog for Gateway Routes.

This module exposes :class:`OperationCatalog`, the read-only index of the
operations one family of providers offers, and the descriptors it stores.

Descriptors
-----------
- ``ParameterDescriptor``: name, declared annotation, injected flag.
- ``OperationDescriptor``: normalized name, provider code, ordered parameters,
  bound callable and metadata collected from ``meta_*`` marker options.

Marker discovery
----------------
``_iter_marked_methods`` walks the MRO of ``type(provider)`` (derived class
wins), scans ``__dict__`` for plain functions carrying
``_operation_decorator_kw`` markers and yields one item per marker, in
declaration order.

Names
-----
The operation name is the explicit ``name=`` of the marker or the function
name converted from snake_case to camelCase. Names are then uncapitalized
(first letter lower-cased, rest unchanged), both when registering and when
looking up, so ``"StripPrefix"`` and ``"stripPrefix"`` find the same entry.

Overloads
---------
Several descriptors may share a name. They are kept in discovery order
(provider order, then declaration order). Two descriptors with the same name
and the same matchable parameter names raise ``CatalogConflict``.

Malformed members (variadic or positional-only parameters, type hints that
cannot be evaluated) are skipped with a warning.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any, get_args, get_origin, get_type_hints

from genro_toolbox import dictExtract
from genro_toolbox.typeutils import safe_is_instance

from gateway_routes.exceptions import CatalogConflict

from .decorators import Injected

__all__ = [
    "OperationCatalog",
    "OperationDescriptor",
    "ParameterDescriptor",
    "normalize_name",
]

logger = logging.getLogger(__name__)

_UNSUPPORTED_KINDS = (
    inspect.Parameter.VAR_POSITIONAL,
    inspect.Parameter.VAR_KEYWORD,
    inspect.Parameter.POSITIONAL_ONLY,
)


def normalize_name(name: str) -> str:
    """Return ``name`` with its first letter lower-cased."""
    return name[:1].lower() + name[1:]


def _camelize(func_name: str) -> str:
    head, *rest = func_name.strip("_").split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


@dataclass(frozen=True)
class ParameterDescriptor:
    """Declared parameter of an operation.

    Attributes:
        name: Parameter name as declared.
        annotation: Declared type (``str`` when not annotated).
        injected: True when declared ``Annotated[..., Injected()]``.
    """

    name: str
    annotation: Any = str
    injected: bool = False


@dataclass(frozen=True)
class OperationDescriptor:
    """One invocable operation (one overload).

    Attributes:
        name: Normalized operation name.
        provider: Code of the provider declaring it.
        parameters: Declared parameters in declaration order.
        func: Bound callable.
        metadata: Options from ``meta_*`` marker keys.
    """

    name: str
    provider: str
    parameters: tuple[ParameterDescriptor, ...]
    func: Callable = field(repr=False, compare=False)
    metadata: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @property
    def parameter_names(self) -> tuple[str, ...]:
        """Names of the parameters that take part in matching."""
        return tuple(p.name for p in self.parameters if not p.injected)


class OperationCatalog(Mapping[str, tuple[OperationDescriptor, ...]]):
    """Read-only mapping of normalized name to overloads for one family."""

    __slots__ = ("family", "_operations")

    def __init__(self, family: str, operations: Mapping[str, Iterable[OperationDescriptor]]):
        self.family = family
        self._operations: dict[str, tuple[OperationDescriptor, ...]] = {
            name: tuple(descriptors) for name, descriptors in operations.items()
        }

    @classmethod
    def discover(cls, family: str, providers: Iterable[Any]) -> OperationCatalog:
        """Build the catalog of ``family`` from provider instances.

        Providers of other families are ignored.

        Raises:
            TypeError: If a provider is not an OperationProvider instance.
            CatalogConflict: On ambiguous registrations.
        """
        operations: dict[str, list[OperationDescriptor]] = {}
        for provider in providers:
            if not safe_is_instance(provider, "gateway_routes.core.provider.OperationProvider"):
                raise TypeError(
                    f"Operation provider must be an OperationProvider instance, "
                    f"got {type(provider).__name__}"
                )
            if provider.provider_family != family:
                continue
            for descriptor in _describe_provider(provider):
                overloads = operations.setdefault(descriptor.name, [])
                for existing in overloads:
                    if set(existing.parameter_names) == set(descriptor.parameter_names):
                        raise CatalogConflict(descriptor.name, descriptor.parameter_names)
                overloads.append(descriptor)
        catalog = cls(family, operations)
        logger.debug("Built %s catalog with operations %s", family, sorted(catalog))
        return catalog

    def candidates(self, name: str) -> tuple[OperationDescriptor, ...]:
        """Return the overloads registered under ``name`` (normalized)."""
        return self._operations.get(normalize_name(name), ())

    def __getitem__(self, name: str) -> tuple[OperationDescriptor, ...]:
        return self._operations[normalize_name(name)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._operations

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __repr__(self) -> str:
        return f"<OperationCatalog {self.family} {sorted(self._operations)}>"


def _describe_provider(provider: Any) -> Iterator[OperationDescriptor]:
    for func, marker in _iter_marked_methods(provider):
        name = normalize_name(marker.pop("operation_name", None) or _camelize(func.__name__))
        try:
            parameters = _describe_parameters(func)
        except (TypeError, NameError, ValueError) as exc:
            logger.warning(
                "Skipping operation %s of provider %s: %s", name, provider.provider_code, exc
            )
            continue
        yield OperationDescriptor(
            name=name,
            provider=provider.provider_code,
            parameters=parameters,
            func=func.__get__(provider, type(provider)),
            metadata=dictExtract(marker, "meta_"),
        )


def _iter_marked_methods(provider: Any) -> Iterator[tuple[Callable, dict[str, Any]]]:
    seen_names: set[str] = set()
    for base in type(provider).__mro__:
        for attr_name, value in vars(base).items():
            if not inspect.isfunction(value):
                continue
            if attr_name in seen_names:
                continue
            seen_names.add(attr_name)
            for marker in getattr(value, "_operation_decorator_kw", None) or ():
                yield value, dict(marker)


def _describe_parameters(func: Callable) -> tuple[ParameterDescriptor, ...]:
    sig = inspect.signature(func)
    hints = get_type_hints(func, include_extras=True)
    params = list(sig.parameters.values())[1:]  # drop self
    described = []
    for param in params:
        if param.kind in _UNSUPPORTED_KINDS:
            raise TypeError(f"unsupported parameter kind for '{param.name}': {param.kind}")
        annotation = hints.get(param.name, str)
        injected = False
        if get_origin(annotation) is Annotated:
            base, *extras = get_args(annotation)
            injected = any(isinstance(extra, Injected) for extra in extras)
            if injected:
                annotation = base
        described.append(ParameterDescriptor(param.name, annotation, injected))
    return tuple(described)

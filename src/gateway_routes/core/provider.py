"""Operation providers and the global provider registry.

A provider is a plain object whose methods, marked with ``@operation``, are
factories for one family of gateway functions:

- ``"handler"``: return a handler function or a ``HandlerResult``
- ``"predicate"``: return a request predicate
- ``"filter"``: return a filter function

Provider classes declare two class attributes and register themselves once,
usually at the bottom of their module::

    class HeaderPredicates(OperationProvider):
        provider_code = "headers"
        provider_family = "predicate"

        @operation()
        def header(self, header: str):
            ...

    register_provider(HeaderPredicates)

``available_providers(family=None)`` returns a copy of the registry, and
``default_providers()`` instantiates every registered class with no arguments.
Providers that need collaborators (an HTTP client, service instances...)
accept them as constructor keywords with defaults.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "FAMILIES",
    "OperationProvider",
    "available_providers",
    "default_providers",
    "register_provider",
]

FAMILIES = ("handler", "predicate", "filter")

_PROVIDER_REGISTRY: dict[str, type[OperationProvider]] = {}


class OperationProvider:
    """Base class for objects exposing ``@operation`` factories."""

    # Subclasses MUST define these class attributes
    provider_code: str = ""
    provider_family: str = ""
    provider_description: str = ""

    def close(self) -> None:
        """Release resources held by the provider. No-op by default."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.provider_family}:{self.provider_code}>"


def register_provider(provider_class: type[OperationProvider], name: str | None = None) -> None:
    """Register a provider class globally.

    Args:
        provider_class: An OperationProvider subclass with provider_code and
            provider_family defined.
        name: Optional override name. If provided, overwrites any existing
            registration. If not provided, uses provider_code and raises if
            already registered with a different class.

    Raises:
        TypeError: If provider_class is not an OperationProvider subclass.
        ValueError: If provider_code is missing, the family is unknown or a
            name collision occurs.
    """
    if not isinstance(provider_class, type) or not issubclass(provider_class, OperationProvider):
        raise TypeError("provider_class must be an OperationProvider subclass")
    if not getattr(provider_class, "provider_code", None):
        raise ValueError(
            f"Provider {provider_class.__name__} not following standards: missing provider_code"
        )
    if provider_class.provider_family not in FAMILIES:
        raise ValueError(
            f"Provider {provider_class.__name__} has unknown family "
            f"{provider_class.provider_family!r}; expected one of {', '.join(FAMILIES)}"
        )
    code = name or provider_class.provider_code
    if name is None:
        existing = _PROVIDER_REGISTRY.get(code)
        if existing is not None and existing is not provider_class:
            raise ValueError(f"Provider '{code}' already registered")
    _PROVIDER_REGISTRY[code] = provider_class


def available_providers(family: str | None = None) -> dict[str, type[OperationProvider]]:
    """Return a copy of the global registry, optionally restricted to one family."""
    return {
        code: cls
        for code, cls in _PROVIDER_REGISTRY.items()
        if family is None or cls.provider_family == family
    }


def default_providers(**overrides: Any) -> list[OperationProvider]:
    """Instantiate every registered provider in registration order.

    Args:
        **overrides: Provider code mapped to a ready-made instance used in
            place of the default one (e.g. ``handlers=HandlerFunctions(client=c)``).
    """
    providers: list[OperationProvider] = []
    for code, cls in _PROVIDER_REGISTRY.items():
        providers.append(overrides[code] if code in overrides else cls())
    return providers

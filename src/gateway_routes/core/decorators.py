"""Decorator helpers for marking provider operations.

This module contains only marker helpers; no catalog mutation happens at
decoration time.

``operation(*, name=None, **kwargs)``
    Returns a decorator storing metadata on the function under
    ``_operation_decorator_kw`` as a list of dicts.

    - Explicit logical name: if ``name`` is provided, the payload sets
      ``operation_name`` to that value. Otherwise the catalog derives the name
      from the function name (``strip_prefix`` becomes ``stripPrefix``).
    - Extra ``**kwargs`` are copied verbatim into the payload. ``meta_*`` keys
      end up in the descriptor metadata.
    - Stacking the decorator registers the same function under several names
      (e.g. ``http`` and ``https``).
    - The decorator returns the original function unchanged aside from the marker.

``Injected``
    Marker used inside ``Annotated`` for parameters the compiler never
    supplies. Such parameters are excluded from overload matching and are
    always invoked with ``ABSENT``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

__all__ = ["ABSENT", "Injected", "operation"]

ABSENT: Any = None


class Injected:
    """``Annotated`` marker for parameters resolved to ``ABSENT``.

    Example::

        @operation()
        def http(self, route: Annotated[RouteProperties | None, Injected()] = None):
            ...
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "Injected()"


def operation(*, name: str | None = None, **kwargs: Any) -> Callable[[Callable], Callable]:
    """Mark a provider method as an operation factory.

    Args:
        name: Optional explicit operation name (overrides the function name).
        **kwargs: Extra metadata stored on the marker (e.g. ``meta_shortcut``).

    Returns:
        Decorator that marks the function.

    Example::

        class MyPredicates(OperationProvider):
            provider_code = "my_predicates"
            provider_family = "predicate"

            @operation()
            def header(self, header: str):
                ...

            @operation(name="header")
            def header_matching(self, header: str, regexp: str):
                ...
    """

    def decorator(func: Callable) -> Callable:
        markers = list(getattr(func, "_operation_decorator_kw", []))
        payload: dict[str, Any] = {}
        if name is not None:
            payload["operation_name"] = name
        payload.update(kwargs)
        markers.append(payload)
        setattr(func, "_operation_decorator_kw", markers)
        return func

    return decorator

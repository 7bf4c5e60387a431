"""Gateway function types.

- ``HandlerFunction``: ``response(request)``, terminal.
- ``FilterFunction``: ``response(request, next)``, wraps the continuation.
- ``RequestPredicate``: callable ``bool(request)`` composable with ``&``.
- ``HandlerOnly`` / ``HandlerWithFilters``: the two shapes a handler
  operation may return. A bare handler function is accepted as shorthand for
  ``HandlerOnly``.

``all_of(predicates)`` folds predicates left to right with AND and returns
``ALWAYS`` for an empty sequence.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from functools import reduce

import httpx

from .request import ServerRequest

__all__ = [
    "ALWAYS",
    "FilterFunction",
    "HandlerFunction",
    "HandlerOnly",
    "HandlerResult",
    "HandlerWithFilters",
    "RequestPredicate",
    "all_of",
]

HandlerFunction = Callable[[ServerRequest], httpx.Response]
FilterFunction = Callable[[ServerRequest, HandlerFunction], httpx.Response]


class RequestPredicate:
    """Immutable request predicate with a readable description."""

    __slots__ = ("_test", "description")

    def __init__(self, test: Callable[[ServerRequest], bool], description: str = "") -> None:
        self._test = test
        self.description = description or getattr(test, "__name__", repr(test))

    def __call__(self, request: ServerRequest) -> bool:
        return bool(self._test(request))

    def __and__(self, other: Callable[[ServerRequest], bool]) -> RequestPredicate:
        other = other if isinstance(other, RequestPredicate) else RequestPredicate(other)

        def both(request: ServerRequest) -> bool:
            return self(request) and other(request)

        return RequestPredicate(both, f"({self.description} && {other.description})")

    def __repr__(self) -> str:
        return f"<RequestPredicate {self.description}>"


ALWAYS = RequestPredicate(lambda request: True, "*")


def all_of(predicates: Iterable[RequestPredicate]) -> RequestPredicate:
    """Fold ``predicates`` with short-circuit AND, in order."""
    predicates = list(predicates)
    if not predicates:
        return ALWAYS
    return reduce(lambda combined, predicate: combined & predicate, predicates)


@dataclass(frozen=True)
class HandlerOnly:
    """Handler operation result with no extra filters."""

    handler: HandlerFunction


@dataclass(frozen=True)
class HandlerWithFilters:
    """Handler operation result contributing filters to the route.

    The filters run ahead of every configured filter of the route.
    """

    handler: HandlerFunction
    filters: tuple[FilterFunction, ...] = field(default_factory=tuple)


HandlerResult = HandlerOnly | HandlerWithFilters

# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Built-in request predicates.

Operations (configuration name, arguments):

- ``Path``: ``pattern``. Segment patterns separated by ``/``: ``**`` matches
  any number of segments, ``{name}`` any single segment, other segments use
  shell wildcards (``*``, ``?``). ``/api/**`` matches ``/api`` and everything
  below it.
- ``Host``: ``pattern``, same rules with ``.`` as separator
  (``**.example.org``). The port is ignored.
- ``Method``: ``methods``, comma separated (``GET,POST``); in the shortcut
  notation escape the commas (``Method=GET\\,POST``).
- ``Header``: ``header`` (present) or ``header`` + ``regexp`` (any value
  fully matches).
- ``Query``: ``param`` (present) or ``param`` + ``regexp``.
- ``Cookie``: ``name`` + ``regexp``.
- ``After`` / ``Before``: ``datetime``; ``Between``: ``datetime1`` +
  ``datetime2``. ISO-8601, naive values are taken as UTC.

Example::

    predicates:
      - Path=/api/**
      - Header=X-Request-Id,\\d+
      - name: Method
        args: {methods: "GET,HEAD"}
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from fnmatch import fnmatchcase

from gateway_routes.core.decorators import operation
from gateway_routes.core.functions import RequestPredicate
from gateway_routes.core.provider import OperationProvider, register_provider
from gateway_routes.core.request import ServerRequest

__all__ = ["RequestPredicates", "segments_match"]

_VARIABLE_RE = re.compile(r"\{\w+\}")


def segments_match(patterns: list[str], segments: list[str]) -> bool:
    """Match path-like ``segments`` against segment ``patterns``."""
    if not patterns:
        return not segments
    head, rest = patterns[0], patterns[1:]
    if head == "**":
        return any(segments_match(rest, segments[i:]) for i in range(len(segments) + 1))
    if not segments:
        return False
    if not (_VARIABLE_RE.fullmatch(head) or fnmatchcase(segments[0], head)):
        return False
    return segments_match(rest, segments[1:])


def _split(value: str, separator: str) -> list[str]:
    return [chunk for chunk in value.split(separator) if chunk]


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class RequestPredicates(OperationProvider):
    """Predicates over method, path, host, headers, query, cookies and time."""

    provider_code = "predicates"
    provider_family = "predicate"
    provider_description = "Built-in request predicates"

    @operation()
    def path(self, pattern: str) -> RequestPredicate:
        patterns = _split(pattern, "/")
        return RequestPredicate(
            lambda request: segments_match(patterns, _split(request.path, "/")),
            f"Path: {pattern}",
        )

    @operation()
    def host(self, pattern: str) -> RequestPredicate:
        patterns = _split(pattern.lower(), ".")

        def test(request: ServerRequest) -> bool:
            host = request.headers.get("host") or request.url.host
            host = host.rsplit(":", 1)[0] if ":" in host and not host.endswith("]") else host
            return segments_match(patterns, _split(host.lower(), "."))

        return RequestPredicate(test, f"Host: {pattern}")

    @operation()
    def method(self, methods: list[str]) -> RequestPredicate:
        allowed = frozenset(m.strip().upper() for m in methods)
        return RequestPredicate(
            lambda request: request.method.upper() in allowed,
            f"Methods: {sorted(allowed)}",
        )

    @operation()
    def header(self, header: str) -> RequestPredicate:
        return RequestPredicate(lambda request: header in request.headers, f"Header: {header}")

    @operation(name="header")
    def header_matching(self, header: str, regexp: str) -> RequestPredicate:
        compiled = re.compile(regexp)
        return RequestPredicate(
            lambda request: any(
                compiled.fullmatch(value) for value in request.headers.get_list(header)
            ),
            f"Header: {header} regexp={regexp}",
        )

    @operation()
    def query(self, param: str) -> RequestPredicate:
        return RequestPredicate(lambda request: param in request.params, f"Query: {param}")

    @operation(name="query")
    def query_matching(self, param: str, regexp: str) -> RequestPredicate:
        compiled = re.compile(regexp)
        return RequestPredicate(
            lambda request: any(
                compiled.fullmatch(value) for value in request.params.get_list(param)
            ),
            f"Query: {param} regexp={regexp}",
        )

    @operation()
    def cookie(self, name: str, regexp: str) -> RequestPredicate:
        compiled = re.compile(regexp)

        def test(request: ServerRequest) -> bool:
            value = request.cookies.get(name)
            return value is not None and compiled.fullmatch(value) is not None

        return RequestPredicate(test, f"Cookie: {name} regexp={regexp}")

    @operation()
    def after(self, datetime: datetime) -> RequestPredicate:
        moment = _aware(datetime)
        return RequestPredicate(lambda request: _now() > moment, f"After: {moment.isoformat()}")

    @operation()
    def before(self, datetime: datetime) -> RequestPredicate:
        moment = _aware(datetime)
        return RequestPredicate(lambda request: _now() < moment, f"Before: {moment.isoformat()}")

    @operation()
    def between(self, datetime1: datetime, datetime2: datetime) -> RequestPredicate:
        start, end = _aware(datetime1), _aware(datetime2)
        if not start < end:
            raise ValueError(f"Between: {start.isoformat()} must be before {end.isoformat()}")
        return RequestPredicate(
            lambda request: start < _now() < end,
            f"Between: {start.isoformat()} and {end.isoformat()}",
        )


register_provider(RequestPredicates)

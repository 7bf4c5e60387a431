# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Route descriptions bound from configuration.

Configuration loading is left to the host application; these pydantic models
bind the already-loaded mapping and reject malformed input early.

Shape::

    {
        "routes": [
            {
                "id": "api",
                "uri": "http://backend.local:8080",
                "predicates": ["Path=/api/**", {"name": "Method", "args": {"methods": "GET"}}],
                "filters": ["StripPrefix=1"],
            },
        ],
        "routes_map": {
            "users": {"uri": "lb://users", "predicates": ["Path=/users/**"]},
        },
    }

Predicates and filters accept either a mapping with ``name`` and ``args`` or
the shortcut string ``"Name=arg1,arg2"`` (``\\,`` keeps a literal comma).
Scalar argument values are converted to strings, as configuration sources
usually provide them.

Route ids must be unique across ``routes`` and ``routes_map``; a route of
``routes_map`` without ``id`` takes its map key. Routes are iterated by
ascending ``order``, configuration order breaking ties.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

import httpx
from genro_toolbox import smartsplit
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

__all__ = [
    "FilterProperties",
    "GatewayProperties",
    "PredicateProperties",
    "RouteProperties",
]


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class _OperationProperties(BaseModel):
    """Name plus arguments of one predicate or filter."""

    model_config = ConfigDict(frozen=True)

    name: str
    args: dict[str, str] | list[str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _parse_shortcut(cls, data: Any) -> Any:
        if not isinstance(data, str):
            return data
        name, sep, raw = data.partition("=")
        args: list[str] = []
        if sep and raw.strip():
            args = [chunk.replace("\\,", ",") for chunk in smartsplit(raw, ",")]
        return {"name": name.strip(), "args": args}

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("operation name must not be empty")
        return value

    @field_validator("args", mode="before")
    @classmethod
    def _stringify_args(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, (str, int, float, bool)):
            return [_text(value)]
        if isinstance(value, Mapping):
            return {str(key): _text(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [_text(item) for item in value]
        return value

    def __str__(self) -> str:
        return f"{self.name}={self.args}"


class PredicateProperties(_OperationProperties):
    """A configured predicate."""


class FilterProperties(_OperationProperties):
    """A configured filter."""


class RouteProperties(BaseModel):
    """One configured route.

    Attributes:
        id: Route identifier, used as the name of the compiled route.
        uri: Destination URI; its scheme selects the handler operation.
        predicates: Predicates combined with AND, in order.
        filters: Filters applied in order.
        metadata: Free-form data copied onto the compiled route.
        order: Sort key of the route; lower values are compiled and
            dispatched first.
    """

    model_config = ConfigDict(frozen=True)

    id: str = ""
    uri: str
    predicates: tuple[PredicateProperties, ...] = ()
    filters: tuple[FilterProperties, ...] = ()
    metadata: dict[str, Any] = Field(default_factory=dict)
    order: int = 0

    @field_validator("uri")
    @classmethod
    def _check_uri(cls, value: str) -> str:
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise ValueError(f"invalid route uri {value!r}: {exc}") from exc
        if not url.scheme:
            raise ValueError(f"route uri {value!r} has no scheme")
        return value

    @property
    def url(self) -> httpx.URL:
        return httpx.URL(self.uri)

    @property
    def scheme(self) -> str:
        return self.url.scheme


class GatewayProperties(BaseModel):
    """All configured routes."""

    model_config = ConfigDict(frozen=True)

    routes: tuple[RouteProperties, ...] = ()
    routes_map: dict[str, RouteProperties] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_ids(self) -> GatewayProperties:
        seen: set[str] = set()
        for index, route in enumerate(self.routes):
            if not route.id:
                raise ValueError(f"route at index {index} has no id")
        for route_id, _route in self.iter_routes():
            if route_id in seen:
                raise ValueError(f"duplicate route id {route_id!r}")
            seen.add(route_id)
        return self

    def iter_routes(self) -> Iterator[tuple[str, RouteProperties]]:
        """Yield ``(route_id, route)`` sorted by ``order``.

        Routes with the same order keep configuration order, ``routes``
        before ``routes_map``.
        """
        entries = [(route.id, route) for route in self.routes]
        entries.extend((route.id or key, route) for key, route in self.routes_map.items())
        yield from sorted(entries, key=lambda entry: entry[1].order)

# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""ServerRequest - in-process view of an incoming request.

The transport adapter (ASGI, WSGI, tests...) builds one ``ServerRequest`` per
incoming request and hands it to the compiled routes. Responses are plain
``httpx.Response`` objects.

``attributes`` is the per-request context shared by every filter and the
handler of one exchange. The head filter of each route stores the route
destination under ``GATEWAY_REQUEST_URL_ATTR`` and the route id under
``GATEWAY_ROUTE_ID_ATTR``; handler-contributed filters may overwrite the
destination before the handler reads it. Filters set
``PRESERVE_HOST_HEADER_ATTR`` to forward the incoming ``Host`` header.

Example::

    request = ServerRequest.build("GET", "http://gateway.local/api/users?page=2")
    rewritten = request.with_raw_path("/users")
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import quote

import httpx

__all__ = [
    "GATEWAY_REQUEST_URL_ATTR",
    "GATEWAY_ROUTE_ID_ATTR",
    "PRESERVE_HOST_HEADER_ATTR",
    "ServerRequest",
]

GATEWAY_REQUEST_URL_ATTR = "gateway_request_url"
GATEWAY_ROUTE_ID_ATTR = "gateway_route_id"
PRESERVE_HOST_HEADER_ATTR = "gateway_preserve_host_header"

# Characters kept as is when encoding a path; "%" keeps existing escapes.
_PATH_SAFE = "/%:@!$&'()*+,;=~"


@dataclass(frozen=True)
class ServerRequest:
    """Incoming request seen by predicates, filters and handlers.

    Attributes:
        method: Upper-case HTTP method.
        url: Full request URL.
        headers: Request headers.
        content: Request body.
        attributes: Per-request context, shared by copies made with ``replace``.
    """

    method: str
    url: httpx.URL
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    content: bytes = b""
    attributes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        method: str,
        url: str | httpx.URL,
        *,
        headers: Mapping[str, str] | None = None,
        content: bytes = b"",
    ) -> ServerRequest:
        return cls(method.upper(), httpx.URL(url), httpx.Headers(headers or {}), content)

    @property
    def path(self) -> str:
        return self.url.path

    @property
    def raw_path(self) -> str:
        """Percent-encoded path, without the query."""
        return self.url.raw_path.partition(b"?")[0].decode("ascii")

    @property
    def params(self) -> httpx.QueryParams:
        return self.url.params

    @property
    def cookies(self) -> dict[str, str]:
        """Cookies parsed from the ``Cookie`` header."""
        cookies: dict[str, str] = {}
        for header in self.headers.get_list("cookie"):
            for chunk in header.split(";"):
                name, sep, value = chunk.strip().partition("=")
                if sep and name:
                    cookies[name] = value
        return cookies

    def with_url(self, url: httpx.URL) -> ServerRequest:
        return replace(self, url=url)

    def with_raw_path(self, raw_path: str) -> ServerRequest:
        """Copy with a new encoded path; the query is kept and escapes are not decoded."""
        encoded = quote(raw_path or "/", safe=_PATH_SAFE).encode("ascii")
        if self.url.query:
            encoded += b"?" + self.url.query
        return replace(self, url=self.url.copy_with(raw_path=encoded))

    def with_headers(self, headers: httpx.Headers) -> ServerRequest:
        return replace(self, headers=headers)

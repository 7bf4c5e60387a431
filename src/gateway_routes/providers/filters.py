# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Built-in filters.

Each operation returns a filter function ``filter(request, call_next)``.

Path:
    - ``StripPrefix``: drop the first path segment, or ``parts`` segments.
    - ``PrefixPath``: ``prefix`` prepended to the path.
    - ``SetPath``: ``path`` replaces the path.
    - ``RewritePath``: ``regexp`` + ``replacement``; ``${name}`` in the
      replacement refers to a named group.

Request:
    - ``AddRequestHeader`` / ``SetRequestHeader``: ``name`` + ``values``.
    - ``RemoveRequestHeader``: ``name``.
    - ``AddRequestParameter``: ``name`` + ``values``.
    - ``RemoveRequestParameter``: ``name``.
    - ``SetRequestHostHeader``: ``host``.
    - ``PreserveHostHeader``: forward the incoming ``Host`` header unchanged.

Response:
    - ``AddResponseHeader`` / ``SetResponseHeader``: ``name`` + ``values``.
    - ``RemoveResponseHeader``: ``name``.
    - ``SetStatus``: ``status``.
    - ``RedirectTo``: ``status`` (3xx) + ``uri``; answers without calling the
      rest of the chain.

Path filters read and write the percent-encoded path, so escapes such as
``%2F`` reach the destination unchanged.
"""

from __future__ import annotations

import re
from collections.abc import Callable

import httpx

from gateway_routes.core.decorators import operation
from gateway_routes.core.functions import FilterFunction, HandlerFunction
from gateway_routes.core.provider import OperationProvider, register_provider
from gateway_routes.core.request import PRESERVE_HOST_HEADER_ATTR, ServerRequest

__all__ = ["FilterFunctions"]

_SPRING_GROUP_RE = re.compile(r"\$\{(\w+)\}")


def _request_filter(
    transform: Callable[[ServerRequest], ServerRequest],
) -> FilterFunction:
    def request_filter(request: ServerRequest, call_next: HandlerFunction) -> httpx.Response:
        return call_next(transform(request))

    return request_filter


def _response_filter(
    transform: Callable[[httpx.Response], None],
) -> FilterFunction:
    def response_filter(request: ServerRequest, call_next: HandlerFunction) -> httpx.Response:
        response = call_next(request)
        transform(response)
        return response

    return response_filter


def _edit_headers(request: ServerRequest, edit: Callable[[httpx.Headers], None]) -> ServerRequest:
    headers = httpx.Headers(request.headers)
    edit(headers)
    return request.with_headers(headers)


class FilterFunctions(OperationProvider):
    """Path, header, parameter and status filters."""

    provider_code = "filters"
    provider_family = "filter"
    provider_description = "Built-in request/response filters"

    # ------------------------------------------------------------------
    # Path
    # ------------------------------------------------------------------
    @operation(name="stripPrefix")
    def strip_first_prefix(self) -> FilterFunction:
        return self.strip_prefix(1)

    @operation()
    def strip_prefix(self, parts: int) -> FilterFunction:
        if parts < 0:
            raise ValueError(f"StripPrefix parts must not be negative, got {parts}")

        def strip(request: ServerRequest) -> ServerRequest:
            segments = [chunk for chunk in request.raw_path.split("/") if chunk]
            path = "/" + "/".join(segments[parts:])
            if request.raw_path.endswith("/") and len(segments) > parts:
                path += "/"
            return request.with_raw_path(path)

        return _request_filter(strip)

    @operation()
    def prefix_path(self, prefix: str) -> FilterFunction:
        prefix = ("/" + prefix.strip("/")).rstrip("/")
        return _request_filter(lambda request: request.with_raw_path(prefix + request.raw_path))

    @operation()
    def set_path(self, path: str) -> FilterFunction:
        return _request_filter(lambda request: request.with_raw_path(path))

    @operation()
    def rewrite_path(self, regexp: str, replacement: str) -> FilterFunction:
        compiled = re.compile(regexp)
        template = _SPRING_GROUP_RE.sub(r"\\g<\1>", replacement.replace("$\\", "$"))
        return _request_filter(
            lambda request: request.with_raw_path(compiled.sub(template, request.raw_path))
        )

    # ------------------------------------------------------------------
    # Request
    # ------------------------------------------------------------------
    @operation()
    def add_request_header(self, name: str, values: list[str]) -> FilterFunction:
        def edit(headers: httpx.Headers) -> None:
            headers[name] = ", ".join([*headers.get_list(name), *values])

        return _request_filter(lambda request: _edit_headers(request, edit))

    @operation()
    def set_request_header(self, name: str, values: list[str]) -> FilterFunction:
        def edit(headers: httpx.Headers) -> None:
            headers[name] = ", ".join(values)

        return _request_filter(lambda request: _edit_headers(request, edit))

    @operation()
    def remove_request_header(self, name: str) -> FilterFunction:
        def edit(headers: httpx.Headers) -> None:
            headers.pop(name, None)

        return _request_filter(lambda request: _edit_headers(request, edit))

    @operation()
    def set_request_host_header(self, host: str) -> FilterFunction:
        def edit(headers: httpx.Headers) -> None:
            headers["host"] = host

        def set_host(request: ServerRequest) -> ServerRequest:
            request.attributes[PRESERVE_HOST_HEADER_ATTR] = True
            return _edit_headers(request, edit)

        return _request_filter(set_host)

    @operation()
    def preserve_host_header(self) -> FilterFunction:
        def preserve(request: ServerRequest) -> ServerRequest:
            request.attributes[PRESERVE_HOST_HEADER_ATTR] = True
            return request

        return _request_filter(preserve)

    @operation()
    def add_request_parameter(self, name: str, values: list[str]) -> FilterFunction:
        def add(request: ServerRequest) -> ServerRequest:
            params = request.params
            for value in values:
                params = params.add(name, value)
            return request.with_url(request.url.copy_with(params=params))

        return _request_filter(add)

    @operation()
    def remove_request_parameter(self, name: str) -> FilterFunction:
        return _request_filter(
            lambda request: request.with_url(
                request.url.copy_with(params=request.params.remove(name))
            )
        )

    # ------------------------------------------------------------------
    # Response
    # ------------------------------------------------------------------
    @operation()
    def add_response_header(self, name: str, values: list[str]) -> FilterFunction:
        def add(response: httpx.Response) -> None:
            response.headers[name] = ", ".join([*response.headers.get_list(name), *values])

        return _response_filter(add)

    @operation()
    def set_response_header(self, name: str, values: list[str]) -> FilterFunction:
        def set_header(response: httpx.Response) -> None:
            response.headers[name] = ", ".join(values)

        return _response_filter(set_header)

    @operation()
    def remove_response_header(self, name: str) -> FilterFunction:
        return _response_filter(lambda response: response.headers.pop(name, None))

    @operation()
    def set_status(self, status: int) -> FilterFunction:
        def set_code(response: httpx.Response) -> None:
            response.status_code = status

        return _response_filter(set_code)

    @operation()
    def redirect_to(self, status: int, uri: str) -> FilterFunction:
        if not 300 <= status < 400:
            raise ValueError(f"RedirectTo status must be a 3xx code, got {status}")

        def redirect(request: ServerRequest, call_next: HandlerFunction) -> httpx.Response:
            return httpx.Response(status, headers={"location": uri})

        return redirect


register_provider(FilterFunctions)

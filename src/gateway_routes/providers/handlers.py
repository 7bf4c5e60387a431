# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Built-in destination handlers.

Handler operations are named after the destination scheme:

- ``http`` / ``https``: forward the request to the destination stored in
  ``request.attributes[GATEWAY_REQUEST_URL_ATTR]``, keeping the request path
  and query.
- ``lb``: takes the route ``uri`` (``lb://service-id``). Returns the HTTP
  handler plus a load-balancer filter that replaces the destination with one
  of the known instances of ``service-id``, or answers 503 when there is none.
- ``no``: answers 200 with an empty body; useful with filters such as
  ``RedirectTo`` that answer on their own.

Outbound HTTP goes through the ``httpx.Client`` given to the provider, so
timeouts, proxies and transports are configured there::

    handlers = HandlerFunctions(
        client=httpx.Client(timeout=5.0),
        instances={"users": ["http://10.0.0.5:8080", "http://10.0.0.6:8080"]},
    )
    compiler = RouteCompiler(default_providers(handlers=handlers))
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence

import httpx

from gateway_routes.core.decorators import operation
from gateway_routes.core.functions import (
    FilterFunction,
    HandlerFunction,
    HandlerOnly,
    HandlerWithFilters,
)
from gateway_routes.core.provider import OperationProvider, register_provider
from gateway_routes.core.request import (
    GATEWAY_REQUEST_URL_ATTR,
    PRESERVE_HOST_HEADER_ATTR,
    ServerRequest,
)

__all__ = ["HOP_BY_HOP_HEADERS", "HandlerFunctions"]

logger = logging.getLogger(__name__)

HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


class HandlerFunctions(OperationProvider):
    """Handlers for ``http``, ``https``, ``lb`` and ``no`` destinations.

    Args:
        client: Client used for outbound requests (default: an ``httpx.Client``
            created on the first forwarded request).
        instances: Service id mapped to the base URLs of its instances, used
            by ``lb`` routes.
    """

    provider_code = "handlers"
    provider_family = "handler"
    provider_description = "Built-in destination handlers"

    def __init__(
        self,
        client: httpx.Client | None = None,
        instances: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        self._client = client
        self.instances = {service: tuple(urls) for service, urls in (instances or {}).items()}

    @property
    def client(self) -> httpx.Client:
        """Outbound client, created on first use when none was given."""
        if self._client is None:
            self._client = httpx.Client()
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()

    @operation(name="https")
    @operation()
    def http(self) -> HandlerOnly:
        return HandlerOnly(self.forward)

    @operation()
    def lb(self, uri: str) -> HandlerWithFilters:
        return HandlerWithFilters(self.forward, (self._load_balancer(httpx.URL(uri).host),))

    @operation()
    def no(self) -> HandlerFunction:
        def no_op(request: ServerRequest) -> httpx.Response:
            return httpx.Response(200)

        return no_op

    def forward(self, request: ServerRequest) -> httpx.Response:
        """Send ``request`` to its destination and return the response."""
        destination: httpx.URL = request.attributes[GATEWAY_REQUEST_URL_ATTR]
        url = request.url.copy_with(
            scheme=destination.scheme, host=destination.host, port=destination.port
        )
        headers = httpx.Headers(
            [
                (name, value)
                for name, value in request.headers.multi_items()
                if name not in HOP_BY_HOP_HEADERS
            ]
        )
        if not request.attributes.get(PRESERVE_HOST_HEADER_ATTR):
            headers.pop("host", None)
        logger.debug("Forwarding %s %s", request.method, url)
        outbound = self.client.build_request(
            request.method, url, headers=headers, content=request.content
        )
        return self.client.send(outbound)

    def _load_balancer(self, service_id: str) -> FilterFunction:
        def load_balance(request: ServerRequest, call_next: HandlerFunction) -> httpx.Response:
            instances = self.instances.get(service_id)
            if not instances:
                return httpx.Response(503, text=f"No instance available for {service_id}")
            request.attributes[GATEWAY_REQUEST_URL_ATTR] = httpx.URL(random.choice(instances))
            return call_next(request)

        return load_balance


register_provider(HandlerFunctions)

# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for the built-in destination handlers."""

from __future__ import annotations

import httpx
import pytest

from gateway_routes import GATEWAY_REQUEST_URL_ATTR, RouteCompiler, RouteProperties, ServerRequest
from gateway_routes.providers.filters import FilterFunctions
from gateway_routes.providers.handlers import HandlerFunctions


class Backend:
    """MockTransport handler recording outbound requests."""

    def __init__(self):
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(200, text=f"{request.url.host}{request.url.path}")


@pytest.fixture
def backend():
    return Backend()


@pytest.fixture
def make_compiler(backend):
    def factory(**instances):
        handlers = HandlerFunctions(
            client=httpx.Client(transport=httpx.MockTransport(backend)),
            instances=instances,
        )
        return RouteCompiler([handlers, FilterFunctions()])

    return factory


def _route(uri, filters=()):
    return RouteProperties.model_validate({"id": "r", "uri": uri, "filters": list(filters)})


def test_http_forwards_path_query_and_body(make_compiler, backend):
    route_function = make_compiler().compile(_route("http://users.internal:8081"))
    request = ServerRequest.build(
        "post",
        "http://gateway.local/users?active=1",
        headers={"Content-Type": "application/json", "X-Trace": "t1"},
        content=b'{"name": "ada"}',
    )

    response = route_function(request)

    assert response.text == "users.internal/users"
    (outbound,) = backend.requests
    assert outbound.method == "POST"
    assert outbound.url == httpx.URL("http://users.internal:8081/users?active=1")
    assert outbound.headers["x-trace"] == "t1"
    assert outbound.content == b'{"name": "ada"}'


def test_http_drops_hop_by_hop_and_incoming_host(make_compiler, backend):
    route_function = make_compiler().compile(_route("http://users.internal"))
    request = ServerRequest.build(
        "GET",
        "http://gateway.local/",
        headers={"Host": "gateway.local", "Connection": "keep-alive", "Upgrade": "h2c"},
    )

    route_function(request)

    (outbound,) = backend.requests
    assert outbound.headers["host"] == "users.internal"
    assert "upgrade" not in outbound.headers


def test_preserve_host_header_forwards_incoming_host(make_compiler, backend):
    route_function = make_compiler().compile(
        _route("http://users.internal", filters=["PreserveHostHeader"])
    )

    route_function(
        ServerRequest.build("GET", "http://gateway.local/", headers={"Host": "public.example.org"})
    )

    (outbound,) = backend.requests
    assert outbound.headers["host"] == "public.example.org"


def test_https_uses_same_forwarding(make_compiler, backend):
    route_function = make_compiler().compile(_route("https://secure.internal"))

    route_function(ServerRequest.build("GET", "http://gateway.local/login"))

    (outbound,) = backend.requests
    assert outbound.url == httpx.URL("https://secure.internal/login")


def test_lb_picks_a_known_instance(make_compiler, backend):
    compiler = make_compiler(users=["http://10.0.0.5:8080"])
    route_function = compiler.compile(_route("lb://users"))
    request = ServerRequest.build("GET", "http://gateway.local/users/1")

    response = route_function(request)

    assert response.status_code == 200
    (outbound,) = backend.requests
    assert outbound.url == httpx.URL("http://10.0.0.5:8080/users/1")
    assert request.attributes[GATEWAY_REQUEST_URL_ATTR] == httpx.URL("http://10.0.0.5:8080")


def test_lb_without_instances_answers_503(make_compiler, backend):
    route_function = make_compiler().compile(_route("lb://unknown"))

    response = route_function(ServerRequest.build("GET", "http://gateway.local/"))

    assert response.status_code == 503
    assert "unknown" in response.text
    assert backend.requests == []


def test_lb_filter_runs_before_configured_filters(make_compiler, backend):
    compiler = make_compiler(users=["http://10.0.0.5:8080"])
    route_function = compiler.compile(_route("lb://users", filters=["StripPrefix=1"]))

    route_function(ServerRequest.build("GET", "http://gateway.local/users/1"))

    (outbound,) = backend.requests
    assert outbound.url == httpx.URL("http://10.0.0.5:8080/1")


def test_no_handler_answers_ok_without_forwarding(make_compiler, backend):
    route_function = make_compiler().compile(_route("no://op"))

    response = route_function(ServerRequest.build("GET", "http://gateway.local/"))

    assert response.status_code == 200
    assert backend.requests == []


def test_close_closes_client():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    handlers = HandlerFunctions(client=client)

    handlers.close()

    assert client.is_closed


def test_client_is_created_on_first_use():
    handlers = HandlerFunctions()

    handlers.close()
    assert handlers._client is None

    client = handlers.client
    assert handlers.client is client
    handlers.close()
    assert client.is_closed


def test_compiler_close_releases_provider_clients():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    compiler = RouteCompiler([HandlerFunctions(client=client), FilterFunctions()])
    compiler.compile(_route("http://users.internal"))

    compiler.close()

    assert client.is_closed

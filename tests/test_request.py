# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for ServerRequest and RouteFunction."""

from __future__ import annotations

import httpx

from gateway_routes import ALWAYS, RequestPredicate, RouteFunction, ServerRequest
from gateway_routes.core.functions import all_of


def test_build_normalizes_method_and_url():
    request = ServerRequest.build("get", "http://gateway.local/a/b?x=1", headers={"X-A": "1"})

    assert request.method == "GET"
    assert request.path == "/a/b"
    assert request.params["x"] == "1"
    assert request.headers["x-a"] == "1"
    assert request.content == b""
    assert request.attributes == {}


def test_cookies_are_parsed_from_header():
    request = ServerRequest.build("GET", "http://g/", headers={"Cookie": "a=1; b=two; broken"})

    assert request.cookies == {"a": "1", "b": "two"}


def test_copies_share_attributes():
    request = ServerRequest.build("GET", "http://g/old?q=1")

    copy = request.with_raw_path("/new")
    copy.attributes["seen"] = True

    assert copy.url == httpx.URL("http://g/new?q=1")
    assert request.path == "/old"
    assert request.attributes == {"seen": True}
    assert request.with_raw_path("").path == "/"


def test_predicate_composition_descriptions():
    a = RequestPredicate(lambda request: True, "a")
    b = RequestPredicate(lambda request: False, "b")

    assert (a & b).description == "(a && b)"
    assert all_of([]) is ALWAYS
    assert all_of([a]) is a
    assert repr(a) == "<RequestPredicate a>"


def test_route_function_runs_filters_around_handler():
    events = []

    def outer(request, call_next):
        events.append("outer")
        return call_next(request)

    def inner(request, call_next):
        events.append("inner")
        response = call_next(request)
        response.headers["x-inner"] = "1"
        return response

    def handler(request):
        events.append("handler")
        return httpx.Response(204)

    route_function = RouteFunction("r", ALWAYS, [outer, inner], handler)
    request = ServerRequest.build("GET", "http://g/")

    composed = route_function.route(request)
    response = composed(request)

    assert events == ["outer", "inner", "handler"]
    assert response.status_code == 204
    assert response.headers["x-inner"] == "1"
    assert "'r'" in repr(route_function)


def test_route_function_reusable_across_requests():
    calls = []
    route_function = RouteFunction(
        "r",
        RequestPredicate(lambda request: request.method == "GET", "get"),
        [],
        lambda request: calls.append(request.path) or httpx.Response(200),
    )

    assert route_function(ServerRequest.build("POST", "http://g/x")) is None
    assert route_function(ServerRequest.build("GET", "http://g/a")).status_code == 200
    assert route_function(ServerRequest.build("GET", "http://g/b")).status_code == 200
    assert calls == ["/a", "/b"]


def test_raw_path_keeps_escapes_and_query():
    request = ServerRequest.build("GET", "http://g/files/a%2Fb?x=1")

    assert request.path == "/files/a/b"
    assert request.raw_path == "/files/a%2Fb"

    copy = request.with_raw_path("/archive/a%2Fb c")

    assert copy.url.raw_path == b"/archive/a%2Fb%20c?x=1"

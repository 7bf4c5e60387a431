# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for the built-in request predicates."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from gateway_routes import RouteCompiler, RouteProperties, ServerRequest
from gateway_routes.providers.handlers import HandlerFunctions
from gateway_routes.providers.predicates import RequestPredicates, segments_match


@pytest.fixture
def predicates():
    return RequestPredicates()


def _request(url="http://gateway.local/", method="GET", headers=None):
    return ServerRequest.build(method, url, headers=headers)


@pytest.mark.parametrize(
    "pattern, path, expected",
    [
        ("/api/**", "/api", True),
        ("/api/**", "/api/users/42", True),
        ("/api/**", "/apis", False),
        ("/api/*", "/api/users", True),
        ("/api/*", "/api/users/42", False),
        ("/users/{id}", "/users/42", True),
        ("/users/{id}", "/users", False),
        ("/**/health", "/a/b/health", True),
        ("/files/*.txt", "/files/readme.txt", True),
        ("/files/*.txt", "/files/readme.md", False),
        ("/", "/", True),
    ],
)
def test_path_patterns(predicates, pattern, path, expected):
    predicate = predicates.path(pattern)

    assert predicate(_request(f"http://gateway.local{path}")) is expected


def test_segments_match_double_star_may_be_empty():
    assert segments_match(["**"], [])
    assert segments_match(["a", "**", "b"], ["a", "b"])
    assert not segments_match(["a"], [])


def test_host_pattern_uses_host_header_without_port(predicates):
    predicate = predicates.host("**.example.org")

    assert predicate(_request(headers={"Host": "api.eu.example.org:8443"}))
    assert predicate(_request("http://shop.example.org/"))
    assert not predicate(_request(headers={"Host": "example.com"}))


def test_method_predicate(predicates):
    predicate = predicates.method(["get", "HEAD"])

    assert predicate(_request(method="GET"))
    assert predicate(_request(method="head"))
    assert not predicate(_request(method="POST"))


def test_header_presence_and_regexp(predicates):
    present = predicates.header("X-Request-Id")
    numeric = predicates.header_matching("X-Request-Id", r"\d+")

    assert present(_request(headers={"x-request-id": "abc"}))
    assert not present(_request())
    assert numeric(_request(headers={"X-Request-Id": "123"}))
    assert not numeric(_request(headers={"X-Request-Id": "12a"}))


def test_query_presence_and_regexp(predicates):
    present = predicates.query("page")
    numeric = predicates.query_matching("page", r"\d+")

    assert present(_request("http://gateway.local/?page=x"))
    assert not present(_request("http://gateway.local/?size=1"))
    assert numeric(_request("http://gateway.local/?page=2"))
    assert not numeric(_request("http://gateway.local/?page=two"))


def test_cookie_predicate(predicates):
    predicate = predicates.cookie("session", r"[a-f0-9]+")

    assert predicate(_request(headers={"Cookie": "theme=dark; session=beef01"}))
    assert not predicate(_request(headers={"Cookie": "session=XYZ"}))
    assert not predicate(_request())


def test_time_window_predicates(predicates):
    now = datetime.now(timezone.utc)
    past, future = now - timedelta(hours=1), now + timedelta(hours=1)
    request = _request()

    assert predicates.after(past)(request)
    assert not predicates.after(future)(request)
    assert predicates.before(future)(request)
    assert not predicates.before(past)(request)
    assert predicates.between(past, future)(request)
    assert not predicates.between(future, future + timedelta(hours=1))(request)


def test_naive_datetimes_are_utc(predicates):
    predicate = predicates.after(datetime(2000, 1, 1))

    assert predicate.description == "After: 2000-01-01T00:00:00+00:00"


def test_between_requires_ordered_bounds(predicates):
    moment = datetime(2030, 1, 1, tzinfo=timezone.utc)

    with pytest.raises(ValueError, match="must be before"):
        predicates.between(moment, moment)


def test_overloads_resolve_from_configuration():
    compiler = RouteCompiler([RequestPredicates(), HandlerFunctions()])
    route = RouteProperties.model_validate(
        {
            "id": "headers",
            "uri": "no://local",
            "predicates": [
                "Header=X-Tenant",
                r"Header=X-Version,v\d+",
                {"name": "Query", "args": {"param": "debug"}},
                "After=2000-01-01T00:00:00Z",
            ],
        }
    )

    route_function = compiler.compile(route)

    matching = _request(
        "http://gateway.local/?debug=1", headers={"X-Tenant": "a", "X-Version": "v2"}
    )
    assert route_function(matching).status_code == 200
    assert route_function(_request(headers={"X-Tenant": "a", "X-Version": "v2"})) is None

# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for binding route descriptions from configuration mappings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from gateway_routes import FilterProperties, GatewayProperties, PredicateProperties, RouteProperties


class TestShortcutNotation:
    def test_name_and_positional_args(self):
        spec = PredicateProperties.model_validate("Header=X-Request-Id, \\d+")

        assert spec.name == "Header"
        assert spec.args == ["X-Request-Id", "\\d+"]

    def test_name_only(self):
        assert FilterProperties.model_validate("PreserveHostHeader").args == []
        assert FilterProperties.model_validate("StripPrefix=").args == []

    def test_escaped_comma_is_kept_in_one_argument(self):
        spec = PredicateProperties.model_validate(r"Method=GET\,POST")

        assert spec.args == ["GET,POST"]

    def test_only_first_equal_sign_separates_name(self):
        spec = FilterProperties.model_validate("SetPath=/a=b")

        assert spec.name == "SetPath"
        assert spec.args == ["/a=b"]

    def test_empty_name_is_rejected(self):
        with pytest.raises(ValidationError):
            PredicateProperties.model_validate("=value")


class TestArgumentShapes:
    def test_keyed_args_are_stringified(self):
        spec = FilterProperties.model_validate(
            {"name": "RedirectTo", "args": {"status": 302, "uri": "https://x"}}
        )

        assert spec.args == {"status": "302", "uri": "https://x"}

    def test_booleans_become_lowercase_text(self):
        spec = PredicateProperties.model_validate({"name": "Flag", "args": [True, False]})

        assert spec.args == ["true", "false"]

    def test_scalar_args_become_single_positional(self):
        assert FilterProperties.model_validate({"name": "StripPrefix", "args": 2}).args == ["2"]

    def test_missing_args_mean_none(self):
        assert FilterProperties.model_validate({"name": "PreserveHostHeader"}).args == {}
        assert FilterProperties.model_validate({"name": "PreserveHostHeader", "args": None}).args == {}

    def test_str_shows_name_and_args(self):
        assert str(FilterProperties.model_validate("StripPrefix=1")) == "StripPrefix=['1']"


class TestRouteProperties:
    def test_uri_scheme_and_defaults(self):
        route = RouteProperties.model_validate({"id": "r", "uri": "lb://users"})

        assert route.scheme == "lb"
        assert route.url.host == "users"
        assert route.predicates == ()
        assert route.filters == ()
        assert route.metadata == {}
        assert route.order == 0

    def test_uri_without_scheme_is_rejected(self):
        with pytest.raises(ValidationError, match="no scheme"):
            RouteProperties.model_validate({"id": "r", "uri": "/just/a/path"})

    def test_routes_are_frozen(self):
        route = RouteProperties.model_validate({"id": "r", "uri": "http://x"})

        with pytest.raises(ValidationError):
            route.id = "other"


class TestGatewayProperties:
    def test_routes_then_routes_map_in_order(self):
        properties = GatewayProperties.model_validate(
            {
                "routes": [{"id": "a", "uri": "http://a"}, {"id": "b", "uri": "http://b"}],
                "routes_map": {
                    "c": {"uri": "http://c"},
                    "key": {"id": "d", "uri": "http://d"},
                },
            }
        )

        assert [route_id for route_id, _ in properties.iter_routes()] == ["a", "b", "c", "d"]

    def test_routes_are_sorted_by_order(self):
        properties = GatewayProperties.model_validate(
            {
                "routes": [
                    {"id": "late", "uri": "http://a", "order": 10},
                    {"id": "first", "uri": "http://b", "order": -1},
                    {"id": "default", "uri": "http://c"},
                ],
                "routes_map": {"mapped": {"uri": "http://d"}},
            }
        )

        assert [route_id for route_id, _ in properties.iter_routes()] == [
            "first",
            "default",
            "mapped",
            "late",
        ]

    def test_listed_route_requires_id(self):
        with pytest.raises(ValidationError, match="index 1 has no id"):
            GatewayProperties.model_validate(
                {"routes": [{"id": "a", "uri": "http://a"}, {"uri": "http://b"}]}
            )

    def test_duplicate_ids_are_rejected(self):
        with pytest.raises(ValidationError, match="duplicate route id 'a'"):
            GatewayProperties.model_validate(
                {
                    "routes": [{"id": "a", "uri": "http://a"}],
                    "routes_map": {"a": {"uri": "http://other"}},
                }
            )

    def test_empty_configuration(self):
        assert list(GatewayProperties().iter_routes()) == []

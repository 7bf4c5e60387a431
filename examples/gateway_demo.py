from __future__ import annotations

from typing import Annotated

import httpx

from gateway_routes import (
    GatewayProperties,
    Injected,
    OperationProvider,
    RequestPredicate,
    RouteCompiler,
    ServerRequest,
    dispatch,
    operation,
    register_provider,
)
from gateway_routes.core.provider import default_providers
from gateway_routes.providers.handlers import HandlerFunctions


class TenantPredicates(OperationProvider):
    """A custom predicate family member: match requests of one tenant."""

    provider_code = "tenants"
    provider_family = "predicate"

    @operation()
    def tenant(self, name: str, audit: Annotated[list | None, Injected()] = None):
        return RequestPredicate(
            lambda request: request.headers.get("x-tenant") == name, f"Tenant: {name}"
        )


register_provider(TenantPredicates)


def fake_backend(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"host": request.url.host, "path": request.url.path})


CONFIG = {
    "routes": [
        {
            "id": "acme-api",
            "uri": "lb://users",
            "predicates": ["Path=/api/**", "Tenant=acme"],
            "filters": ["StripPrefix=1", "AddResponseHeader=X-Gateway,demo"],
        },
        {
            "id": "legacy",
            "uri": "no://legacy",
            "predicates": ["Path=/old/**"],
            "filters": ["RedirectTo=301,https://example.org/new"],
        },
    ],
    "routes_map": {
        "docs": {"uri": "http://docs.internal:8000", "predicates": ["Host=docs.**"]},
    },
}

if __name__ == "__main__":
    handlers = HandlerFunctions(
        client=httpx.Client(transport=httpx.MockTransport(fake_backend)),
        instances={"users": ["http://10.0.0.5:8080", "http://10.0.0.6:8080"]},
    )
    compiler = RouteCompiler(default_providers(handlers=handlers))
    routes = compiler.compile_all(GatewayProperties.model_validate(CONFIG))

    print("--- Gateway Routes Demo ---")
    for route_function in routes.values():
        print(route_function)

    requests = [
        ServerRequest.build("GET", "http://gw.local/api/users/7", headers={"X-Tenant": "acme"}),
        ServerRequest.build("GET", "http://gw.local/api/users/7", headers={"X-Tenant": "other"}),
        ServerRequest.build("GET", "http://gw.local/old/page"),
        ServerRequest.build("GET", "http://docs.example.org/guide"),
    ]
    for request in requests:
        response = dispatch(routes.values(), request)
        if response is None:
            print(f"{request.url} -> no route")
        elif response.is_redirect:
            print(f"{request.url} -> {response.status_code} {response.headers['location']}")
        else:
            print(f"{request.url} -> {response.status_code} {response.text}")
    compiler.close()

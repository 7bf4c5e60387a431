"""Built-in operation providers for Gateway Routes.

Note: Do not import concrete providers here to keep imports side-effect free.
Concrete provider modules (handlers, predicates, filters) self-register when
imported via the main gateway_routes package.
"""

__all__: list[str] = []

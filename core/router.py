"""Method dispatch on the proxy route."""

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class RouteDecision:
    """Routing decision for a request on the proxy route."""

    route: str  # "preflight", "options", "forward" or "reject"
    method: str


class RouteDecider:
    """Decide how a request on the proxy route is handled."""

    def __init__(self, allowed_methods: tuple[str, ...] | list[str]):
        self.allowed_methods = frozenset(m.upper() for m in allowed_methods)

    def decide(self, method: str, headers: Mapping[str, str]) -> RouteDecision:
        """Return the route for ``method`` and the request headers."""
        method = method.upper()
        if method == "OPTIONS":
            if headers.get("access-control-request-method") is not None:
                return RouteDecision(route="preflight", method=method)
            return RouteDecision(route="options", method=method)
        if method in self.allowed_methods:
            return RouteDecision(route="forward", method=method)
        return RouteDecision(route="reject", method=method)

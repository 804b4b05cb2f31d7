"""Header construction for outbound requests and gateway responses."""

from collections.abc import Mapping

from core.config import Config
from core.origins import OriginValidator


class HeaderBuilder:
    """Build the header sets the gateway sends upstream and downstream."""

    def __init__(self, config: Config, origins: OriginValidator | None = None):
        self._cors = config.cors
        self._user_agent = config.targets.user_agent
        self._origins = origins or OriginValidator(config.cors.allowed_origins)

    @property
    def allow(self) -> str:
        """Value of the ``Allow`` header on the proxy route."""
        return ", ".join((*self._cors.allowed_methods, "OPTIONS"))

    def cors_headers(self, origin: str | None) -> dict[str, str]:
        """Cross-origin headers for a present, trusted origin; empty otherwise."""
        if not origin or not self._origins.is_trusted(origin):
            return {}
        return {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": self.allow,
            "Access-Control-Allow-Headers": ", ".join(self._cors.allowed_headers),
            "Access-Control-Max-Age": str(self._cors.max_age),
            "Vary": "Origin",
        }

    def preflight_headers(self, origin: str | None, requested_headers: str | None) -> dict[str, str]:
        """CORS headers with the requested custom headers echoed back."""
        headers = self.cors_headers(origin)
        headers["Access-Control-Allow-Headers"] = requested_headers or "Content-Type"
        return headers

    def upstream_headers(self, headers: Mapping[str, str], *, with_body: bool) -> dict[str, str]:
        """Reduce inbound headers to the safe outbound subset.

        Authorization, Cookie, Origin, Referer and all other caller headers
        are dropped. Content-Length is kept only for framing.
        """
        upstream = {
            "Content-Type": headers.get("content-type") or "application/json",
            "User-Agent": self._user_agent,
            "Accept-Encoding": "identity",
        }
        content_length = headers.get("content-length")
        if with_body and content_length:
            upstream["Content-Length"] = content_length
        return upstream

    def downstream_headers(self, headers: Mapping[str, str], origin: str | None) -> dict[str, str]:
        """Reduce upstream response headers to content headers plus CORS."""
        downstream = {"Content-Type": headers.get("content-type") or "application/json"}
        content_length = headers.get("content-length")
        # Length no longer matches once httpx has decoded the body
        encoded = headers.get("content-encoding", "identity").lower() != "identity"
        if content_length and not encoded:
            downstream["Content-Length"] = content_length
        downstream.update(self.cors_headers(origin))
        return downstream

"""Target URL allow-list."""

import httpx

from core.exceptions import MalformedInput, PolicyViolation


class TargetValidator:
    """Check that a requested target is an allow-listed (scheme, host)."""

    def __init__(self, allowed_targets: tuple[str, ...] | list[str]):
        self.allowed_targets = tuple(allowed_targets)
        self._pairs = frozenset(
            (url.scheme, url.host) for url in map(httpx.URL, self.allowed_targets)
        )

    def validate(self, raw: str | None) -> bool:
        """Return True when ``raw`` may be forwarded to."""
        try:
            self.check(raw)
        except (MalformedInput, PolicyViolation):
            return False
        return True

    def check(self, raw: str | None) -> httpx.URL:
        """Parse ``raw`` and return it, raising when it may not be forwarded to."""
        if not raw:
            raise PolicyViolation(
                "Target API not allowed", allowed_targets=list(self.allowed_targets)
            )

        url = self.parse(raw)
        if (url.scheme, url.host) not in self._pairs:
            raise PolicyViolation(
                "Target API not allowed", allowed_targets=list(self.allowed_targets)
            )
        return url

    @staticmethod
    def parse(raw: str) -> httpx.URL:
        """Parse an absolute URL with a host and no credentials."""
        try:
            url = httpx.URL(raw)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise MalformedInput("Invalid API URL format") from e
        if not url.is_absolute_url or not url.host:
            raise MalformedInput("Invalid API URL format")
        # httpx would send userinfo upstream as an Authorization header
        if url.userinfo:
            raise MalformedInput("Invalid API URL format")
        return url

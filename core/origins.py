"""Calling-origin allow-list."""


class OriginValidator:
    """Decide whether a browser origin may read gateway responses."""

    def __init__(self, allowed_origins: tuple[str, ...] | list[str]):
        self.allowed_origins = frozenset(allowed_origins)

    def is_trusted(self, origin: str | None) -> bool:
        """Absent origin means a same-origin call; otherwise require an exact match."""
        if origin is None:
            return True
        return origin in self.allowed_origins

"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard, ConsoleLog)."""

    def log_forward(
        self,
        method: str,
        target: str,
        status: int,
        *,
        origin: str | None,
        headers: dict[str, str],
        elapsed_ms: float,
    ) -> None: ...
    def log_rejected(self, method: str, target: str | None, status: int, reason: str) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...

"""Shared request data types."""

from collections.abc import AsyncIterator
from dataclasses import dataclass

import httpx


@dataclass(frozen=True)
class ProxyRequest:
    """Outbound request derived from an inbound proxy call."""

    target: httpx.URL
    method: str
    headers: dict[str, str]
    body: AsyncIterator[bytes] | None = None


@dataclass(frozen=True)
class ProxyResponse:
    """Downstream response derived from the upstream response."""

    status_code: int
    headers: dict[str, str]
    body: AsyncIterator[bytes]

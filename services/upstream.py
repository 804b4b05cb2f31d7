"""Outbound HTTP calls to allow-listed targets."""

import asyncio

import httpx

from core.exceptions import UpstreamConnectionError, UpstreamTimeoutError
from core.request_types import ProxyRequest


class UpstreamClient:
    """Send a single proxied request through a shared httpx client."""

    def __init__(self, client: httpx.AsyncClient, timeout: float) -> None:
        self._client = client
        self._timeout = timeout

    async def send(self, request: ProxyRequest) -> httpx.Response:
        """Send ``request`` and return the response with its body unread.

        The wall-clock timeout covers everything up to the response headers;
        the body is streamed afterwards by the caller, who must close it.
        """
        req = self._client.build_request(
            request.method,
            request.target,
            headers=request.headers,
            content=request.body,
        )
        try:
            return await asyncio.wait_for(
                self._client.send(req, stream=True, follow_redirects=False),
                timeout=self._timeout,
            )
        except (TimeoutError, httpx.TimeoutException) as e:
            raise UpstreamTimeoutError("Request timed out", target=request.target.host) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(
                "Failed to fetch from target API", target=request.target.host
            ) from e

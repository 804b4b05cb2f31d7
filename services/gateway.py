"""Forwarding orchestration for the proxy route."""

import time
from collections.abc import AsyncIterator, Mapping

import httpx
from fastapi import Request, Response
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from core.config import MIB, Config
from core.exceptions import (
    GatewayError,
    MalformedInput,
    RequestTooLarge,
    ResponseTooLarge,
    UnsupportedMethod,
    UpstreamConnectionError,
)
from core.headers import HeaderBuilder
from core.limits import capped, declared_length
from core.origins import OriginValidator
from core.protocols import RequestLogger
from core.request_types import ProxyRequest, ProxyResponse
from core.router import RouteDecider
from core.targets import TargetValidator
from services.upstream import UpstreamClient

BODYLESS_METHODS = ("GET", "HEAD")


def _describe_size(limit: int) -> str:
    if limit >= MIB and limit % MIB == 0:
        return f"{limit // MIB}MB"
    return f"{limit} bytes"


class GatewayService:
    """Validate, forward and rewrite requests on the proxy route."""

    def __init__(
        self,
        config: Config,
        logger: RequestLogger,
        upstream: UpstreamClient,
        origins: OriginValidator | None = None,
        targets: TargetValidator | None = None,
        decider: RouteDecider | None = None,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self._limits = config.limits
        self._logger = logger
        self._upstream = upstream
        self._origins = origins or OriginValidator(config.cors.allowed_origins)
        self._targets = targets or TargetValidator(config.targets.allowed_targets)
        self._decider = decider or RouteDecider(config.cors.allowed_methods)
        self._headers = header_builder or HeaderBuilder(config, self._origins)

    async def handle(self, request: Request) -> Response:
        """Dispatch a request on the proxy route by method."""
        decision = self._decider.decide(request.method, request.headers)
        if decision.route == "preflight":
            return self.preflight(request.headers)
        if decision.route == "options":
            return self.options(request.headers)
        if decision.route == "reject":
            raise UnsupportedMethod(
                f"Only {', '.join(sorted(self._decider.allowed_methods))} methods allowed",
                headers={"Allow": self._headers.allow},
            )
        return await self.forward(request)

    def preflight(self, headers: Mapping[str, str]) -> Response:
        """Answer a CORS preflight; untrusted origins get no CORS headers."""
        origin = headers.get("origin")
        if not self._origins.is_trusted(origin):
            return Response(status_code=200)
        return Response(
            status_code=200,
            headers=self._headers.preflight_headers(
                origin, headers.get("access-control-request-headers")
            ),
        )

    def options(self, headers: Mapping[str, str]) -> Response:
        """Answer a plain OPTIONS request with the supported methods."""
        origin = headers.get("origin")
        if not self._origins.is_trusted(origin):
            return Response(status_code=200)
        return Response(
            status_code=200,
            headers={"Allow": self._headers.allow, **self._headers.cors_headers(origin)},
        )

    async def forward(self, request: Request) -> Response:
        """Forward a request to its allow-listed target and stream the answer back."""
        origin = request.headers.get("origin")
        target = self._targets.check(self._target_param(request))
        proxy_request = self.prepare(request, target)

        started = time.perf_counter()
        upstream = await self._upstream.send(proxy_request)
        try:
            self._check_response_size(upstream.headers)
        except ResponseTooLarge:
            await upstream.aclose()
            raise

        response = ProxyResponse(
            status_code=upstream.status_code,
            headers=self._headers.downstream_headers(upstream.headers, origin),
            body=self.stream_body(upstream),
        )
        self._logger.log_forward(
            proxy_request.method,
            str(target),
            response.status_code,
            origin=origin,
            headers=dict(request.headers),
            elapsed_ms=(time.perf_counter() - started) * 1000,
        )
        return StreamingResponse(
            response.body,
            status_code=response.status_code,
            headers=response.headers,
            background=BackgroundTask(upstream.aclose),
        )

    def prepare(self, request: Request, target: httpx.URL) -> ProxyRequest:
        """Build the outbound request, enforcing the request size ceiling."""
        limit = self._limits.max_request_bytes
        length = declared_length(request.headers)
        if length is not None and length > limit:
            raise RequestTooLarge(f"Request body too large (max {_describe_size(limit)})")

        body = None
        method = request.method.upper()
        if method not in BODYLESS_METHODS and self._has_body(request.headers, length):
            body = capped(
                request.stream(),
                limit,
                lambda: RequestTooLarge(f"Request body too large (max {_describe_size(limit)})"),
            )
        return ProxyRequest(
            target=target,
            method=method,
            headers=self._headers.upstream_headers(request.headers, with_body=body is not None),
            body=body,
        )

    async def stream_body(self, upstream: httpx.Response) -> AsyncIterator[bytes]:
        """Stream the upstream body, counting bytes against the response ceiling."""
        limit = self._limits.max_response_bytes
        host = upstream.request.url.host
        chunks = capped(
            upstream.aiter_bytes(),
            limit,
            lambda: ResponseTooLarge(f"Response too large (max {_describe_size(limit)})"),
        )
        try:
            async for chunk in chunks:
                yield chunk
        except ResponseTooLarge as e:
            # Status already sent; the connection is dropped
            self._logger.log_error(host, e.status_code, e.message)
            await upstream.aclose()
            raise
        except httpx.HTTPError as e:
            self._logger.log_error(host, 502, str(e))
            await upstream.aclose()
            raise UpstreamConnectionError("Upstream failed mid-stream", target=host) from e

    def render_error(self, exc: GatewayError, request: Request) -> JSONResponse:
        """Render ``exc`` as JSON, keeping CORS headers for trusted origins."""
        target = self._target_param(request)
        if exc.status_code < 500:
            self._logger.log_rejected(request.method, target, exc.status_code, exc.message)
        else:
            self._logger.log_error(target or "-", exc.status_code, exc.message)

        headers = {**exc.headers, **self._headers.cors_headers(request.headers.get("origin"))}
        return JSONResponse(exc.to_payload(), status_code=exc.status_code, headers=headers)

    def _check_response_size(self, headers: Mapping[str, str]) -> None:
        limit = self._limits.max_response_bytes
        try:
            length = declared_length(headers)
        except MalformedInput:
            # Unparsable upstream length; the streaming cap still applies
            length = None
        if length is not None and length > limit:
            raise ResponseTooLarge(f"Response too large (max {_describe_size(limit)})")

    @staticmethod
    def _target_param(request: Request) -> str | None:
        # First value wins when apiurl is repeated
        values = request.query_params.getlist("apiurl")
        return values[0] if values else None

    @staticmethod
    def _has_body(headers: Mapping[str, str], length: int | None) -> bool:
        if length is not None:
            return length > 0
        return "transfer-encoding" in headers

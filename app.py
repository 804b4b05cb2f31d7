"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_demo_page, handle_proxy
from core.config import Config
from core.headers import HeaderBuilder
from core.origins import OriginValidator
from core.protocols import RequestLogger
from core.router import RouteDecider
from core.targets import TargetValidator
from services.gateway import GatewayService
from services.upstream import UpstreamClient

PROXY_ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "TRACE", "CONNECT"]


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``transport`` replaces the network transport of the outbound client.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(max_connections=100, max_keepalive_connections=20)
        client = httpx.AsyncClient(
            timeout=config.limits.upstream_timeout,
            limits=limits,
            transport=transport,
        )
        origins = OriginValidator(config.cors.allowed_origins)
        app.state.gateway = GatewayService(
            config=config,
            logger=logger,
            upstream=UpstreamClient(client, config.limits.upstream_timeout),
            origins=origins,
            targets=TargetValidator(config.targets.allowed_targets),
            decider=RouteDecider(config.cors.allowed_methods),
            header_builder=HeaderBuilder(config, origins),
        )
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="CORS Gateway", version="0.1.0", lifespan=lifespan)

    # Unsupported methods still reach the gateway for its JSON 405
    prefix = config.proxy.prefix.rstrip("/")
    app.add_route(
        f"{prefix}/{{path:path}}", handle_proxy, methods=PROXY_ROUTE_METHODS, include_in_schema=False
    )

    @app.api_route("/{path:path}", methods=["GET", "HEAD"], include_in_schema=False)
    async def demo_page(request: Request):
        return await handle_demo_page(request, config)

    return app

"""FastAPI route handlers."""

from fastapi import Request, Response
from fastapi.responses import HTMLResponse

from core.config import Config
from core.exceptions import GatewayError
from services.gateway import GatewayService
from ui.demo_page import render_demo_page


async def handle_proxy(request: Request) -> Response:
    """Handle any method on the proxy route."""
    gateway: GatewayService = request.app.state.gateway
    try:
        return await gateway.handle(request)
    except GatewayError as e:
        return gateway.render_error(e, request)


async def handle_demo_page(_request: Request, config: Config) -> HTMLResponse:
    """Serve the static demo page for every path outside the proxy route."""
    return HTMLResponse(render_demo_page(config))

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config, LimitSettings

TRUSTED_ORIGIN = "https://app.yourdomain.com"
UNTRUSTED_ORIGIN = "https://evil.example.net"
PROXY = "/corsproxy/"


class RecordingLogger:
    """RequestLogger that keeps events in memory."""

    def __init__(self):
        self.forwarded = []
        self.rejected = []
        self.errors = []

    def log_forward(self, method, target, status, *, origin, headers, elapsed_ms):
        self.forwarded.append((method, target, status, origin))

    def log_rejected(self, method, target, status, reason):
        self.rejected.append((method, target, status, reason))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


class FakeUpstream:
    """MockTransport handler that records requests and answers with ``respond``."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.respond = lambda request: httpx.Response(
            200, json={"url": str(request.url)}, headers={"content-type": "application/json"}
        )

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.respond(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def config():
    return Config(limits=LimitSettings(upstream_timeout=0.2))


@pytest.fixture
def make_client(upstream, logger):
    """Build a TestClient for a config; use it as a context manager."""

    def _make(config: Config) -> TestClient:
        app = create_app(config, logger, transport=httpx.MockTransport(upstream))
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, config):
    with make_client(config) as test_client:
        yield test_client

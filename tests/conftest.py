"""Shared test fixtures — app, client, a fake backend, auth helpers.

The backend is replaced by an ``httpx.MockTransport`` wired in through a
dependency override, so no test ever opens a real socket.
"""

from __future__ import annotations

import json
from typing import AsyncGenerator, Callable, Optional

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from flowhr.config import settings
from flowhr.i18n.service import load_messages
from flowhr.main import create_app
from flowhr.proxy.router import get_http_client

BACKEND_URL = "http://backend.test/api"
TEST_TOKEN = "test-token-abc123"


# ── Fake backend ────────────────────────────────────────────────────

class FakeBackend:
    """Records every outbound request and answers with a configurable reply."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={"ok": True})
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    # Reply helpers

    def reply_json(self, status_code: int, body) -> None:
        self.handler = lambda request: httpx.Response(status_code, json=body)

    def reply_text(
        self,
        status_code: int,
        text: str,
        content_type: str = "text/plain",
    ) -> None:
        self.handler = lambda request: httpx.Response(
            status_code, text=text, headers={"content-type": content_type},
        )

    def refuse_connection(self) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        self.handler = _raise

    # Inspection helpers

    @property
    def called(self) -> bool:
        return bool(self.requests)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "backend was never called"
        return self.requests[-1]

    def last_json(self) -> Optional[dict]:
        content = self.last.content
        return json.loads(content) if content else None


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


# ── Settings / global state ─────────────────────────────────────────

@pytest.fixture(autouse=True)
def _backend_url(monkeypatch):
    """Point every proxy route at the fake backend's origin."""
    monkeypatch.setattr(settings, "NEXT_PUBLIC_API_URL", BACKEND_URL)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from flowhr.common.rate_limit import limiter

    limiter.reset()
    yield


@pytest.fixture(autouse=True)
def _clear_translation_cache():
    load_messages.cache_clear()
    yield
    load_messages.cache_clear()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app(backend):
    """Create a fresh app instance with the upstream client overridden."""
    application = create_app()
    upstream = httpx.AsyncClient(transport=httpx.MockTransport(backend))
    application.dependency_overrides[get_http_client] = lambda: upstream
    yield application
    application.dependency_overrides.clear()
    await upstream.aclose()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Auth helpers ────────────────────────────────────────────────────

@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Bearer auth headers carrying the test token."""
    return {"Authorization": f"Bearer {TEST_TOKEN}"}

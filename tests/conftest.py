"""
Test configuration and fixtures for the account recovery portal.

Redis is replaced by a small in-memory async double and the remote account
API by an `httpx.MockTransport`, so every test runs without network access.
"""

import json
from typing import Any, Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api import deps
from app.services.api_client import AccountApiClient
from app.services.session import SessionStore

UPSTREAM_BASE_URL = "http://accounts.test"


class InMemoryRedis:
    """Implements the subset of `redis.asyncio.Redis` the session store uses."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.expiry: dict[str, int | None] = {}

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None, nx: bool = False):
        if nx and key in self.data:
            return None
        self.data[key] = value
        self.expiry[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.expiry.pop(key, None)
        return removed


class UpstreamRecorder:
    """Records requests sent to the account API and replays canned responses."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._replies: dict[str, tuple[int, dict[str, Any]]] = {}

    def reply(self, path: str, status_code: int = 200, **kwargs: Any) -> None:
        """Configure the response for `path` (kwargs go to `httpx.Response`)."""
        self._replies[path] = (status_code, kwargs)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, kwargs = self._replies.get(request.url.path, (200, {"json": {"success": True}}))
        return httpx.Response(status_code, **kwargs)

    def calls(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> dict[str, Any]:
        return json.loads(request.content or b"{}")


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def upstream() -> UpstreamRecorder:
    return UpstreamRecorder()


@pytest.fixture
def http_client(upstream) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=UPSTREAM_BASE_URL, transport=httpx.MockTransport(upstream.handler))


@pytest.fixture
def account_api(http_client) -> AccountApiClient:
    return AccountApiClient(http_client)


@pytest.fixture
def session_store(fake_redis) -> SessionStore:
    return SessionStore(fake_redis)


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app, fake_redis, http_client) -> Generator[TestClient, None, None]:
    """
    Create a test client whose Redis and account API are the in-memory doubles.
    The client keeps cookies between requests, so one test function behaves as
    a single visitor session.
    """
    test_app.dependency_overrides[deps.get_redis] = lambda: fake_redis
    test_app.dependency_overrides[deps.get_http] = lambda: http_client

    with TestClient(test_app) as test_client:
        yield test_client

    test_app.dependency_overrides.clear()

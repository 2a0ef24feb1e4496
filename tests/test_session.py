"""Tests for the Redis-backed session store."""

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from app.api import deps
from app.core.exceptions import SubmissionInProgressError
from app.services.flow import RequestPhase, VerifyPhase


@pytest.mark.asyncio
class TestSessionStore:
    async def test_new_session_starts_at_request(self, session_store):
        assert await session_store.load_recovery_state("visitor-1") == RequestPhase()

    async def test_recovery_state_is_scoped_per_session(self, session_store):
        await session_store.save_recovery_state("visitor-1", VerifyPhase(email="jane@example.com"))

        assert await session_store.load_recovery_state("visitor-1") == VerifyPhase(email="jane@example.com")
        assert await session_store.load_recovery_state("visitor-2") == RequestPhase()

    async def test_state_expires_with_session_ttl(self, session_store, fake_redis):
        await session_store.save_recovery_state("visitor-1", VerifyPhase(email="jane@example.com"))

        assert fake_redis.expiry["session:visitor-1:recovery"] == session_store.ttl_seconds

    async def test_pending_token_round_trip(self, session_store):
        await session_store.set_pending_token("visitor-1", "vt-7")
        assert await session_store.get_pending_token("visitor-1") == "vt-7"

        await session_store.clear_pending_token("visitor-1")
        assert await session_store.get_pending_token("visitor-1") is None

    async def test_second_submission_is_rejected_while_first_is_in_flight(self, session_store):
        async with session_store.submission_guard("visitor-1", "forgot-password"):
            with pytest.raises(SubmissionInProgressError):
                async with session_store.submission_guard("visitor-1", "forgot-password"):
                    pass

    async def test_guard_is_released_after_failure(self, session_store, fake_redis):
        with pytest.raises(RuntimeError):
            async with session_store.submission_guard("visitor-1", "forgot-password"):
                raise RuntimeError("upstream blew up")

        assert "session:visitor-1:inflight:forgot-password" not in fake_redis.data
        async with session_store.submission_guard("visitor-1", "forgot-password"):
            pass


class UnavailableRedis:
    """Session storage double whose every call fails as if Redis were down."""

    async def get(self, key):
        raise RedisConnectionError("Connection refused")

    async def set(self, key, value, ex=None, nx=False):
        raise RedisConnectionError("Connection refused")

    async def delete(self, *keys):
        raise RedisConnectionError("Connection refused")


class TestSessionStoreOutage:
    @pytest.fixture
    def offline_client(self, test_app, http_client):
        test_app.dependency_overrides[deps.get_redis] = lambda: UnavailableRedis()
        test_app.dependency_overrides[deps.get_http] = lambda: http_client

        with TestClient(test_app) as test_client:
            yield test_client

        test_app.dependency_overrides.clear()

    def test_recovery_step_shows_banner_instead_of_crashing(self, offline_client, upstream):
        response = offline_client.post("/forgot-password/request", json={"email": "jane@example.com"})

        assert response.status_code == 503
        assert response.json() == {
            "phase": None,
            "success": None,
            "error": "The service is temporarily unavailable. Please try again.",
        }
        assert upstream.requests == []

    def test_verification_screen_shows_banner_instead_of_crashing(self, offline_client):
        response = offline_client.get("/verify-otp")

        assert response.status_code == 503
        assert response.json()["success"] is None
        assert "try again" in response.json()["error"]

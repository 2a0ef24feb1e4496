"""Visitor session storage backed by Redis."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from redis.asyncio import Redis

from app.core.config import settings
from app.core.exceptions import SubmissionInProgressError
from app.services.flow import RecoveryState, dump_state, load_state


_redis_client: Optional[Redis] = None


def get_redis_client() -> Redis:
    """Return a lazily initialized Redis client shared across the service."""
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis_client


async def close_redis_client() -> None:
    """Close the shared Redis client; invoked during application shutdown."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


def _recovery_key(session_id: str) -> str:
    return f"session:{session_id}:recovery"


def _pending_token_key(session_id: str) -> str:
    return f"session:{session_id}:pending_verification_token"


def _guard_key(session_id: str, form: str) -> str:
    return f"session:{session_id}:inflight:{form}"


class SessionStore:
    """Per-visitor state: the recovery phase and the pending verification token."""

    def __init__(
        self,
        redis_client: Redis,
        ttl_seconds: int = settings.SESSION_TTL_SECONDS,
        guard_seconds: int = settings.SUBMISSION_GUARD_SECONDS,
    ):
        """Receive a Redis client (injected by FastAPI dependency graph)."""
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.guard_seconds = guard_seconds

    async def load_recovery_state(self, session_id: str) -> RecoveryState:
        return load_state(await self.redis.get(_recovery_key(session_id)))

    async def save_recovery_state(self, session_id: str, state: RecoveryState) -> None:
        await self.redis.set(_recovery_key(session_id), dump_state(state), ex=self.ttl_seconds)

    async def clear_recovery_state(self, session_id: str) -> None:
        await self.redis.delete(_recovery_key(session_id))

    async def get_pending_token(self, session_id: str) -> Optional[str]:
        return await self.redis.get(_pending_token_key(session_id))

    async def set_pending_token(self, session_id: str, token: str) -> None:
        await self.redis.set(_pending_token_key(session_id), token, ex=self.ttl_seconds)

    async def clear_pending_token(self, session_id: str) -> None:
        await self.redis.delete(_pending_token_key(session_id))

    @asynccontextmanager
    async def submission_guard(self, session_id: str, form: str) -> AsyncIterator[None]:
        """Allow one outstanding submission per form and session.

        The key expires on its own so a worker that dies mid-request cannot
        lock the form for longer than `guard_seconds`.
        """

        key = _guard_key(session_id, form)
        acquired = await self.redis.set(key, "1", nx=True, ex=self.guard_seconds)
        if not acquired:
            raise SubmissionInProgressError()
        try:
            yield
        finally:
            await self.redis.delete(key)

"""Dependency providers used by FastAPI endpoints.

These helpers expose the visitor session id, the Redis client, the shared
account API client, and the composed services through FastAPI's dependency
injection system so route handlers remain thin.
"""

import re
import secrets

import httpx
from fastapi import Depends, Request, Response
from redis.asyncio import Redis

from app.core.config import settings
from app.services.api_client import AccountApiClient, get_http_client
from app.services.flow import PasswordRecoveryFlow
from app.services.recovery import RecoveryService
from app.services.session import SessionStore, get_redis_client
from app.services.verification import VerificationService

_SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{16,128}$")


def get_session_id(request: Request, response: Response) -> str:
    """Return the visitor's session id, issuing a fresh one when absent or malformed.

    The cookie is re-sent on every request so its lifetime keeps pace with the
    session TTL that each save renews in Redis.
    """

    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not session_id or not _SESSION_ID_PATTERN.match(session_id):
        session_id = secrets.token_urlsafe(32)

    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        session_id,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        samesite="lax",
    )
    return session_id


def get_redis() -> Redis:
    """Return a singleton Redis client used for session storage."""
    return get_redis_client()


def get_http() -> httpx.AsyncClient:
    """Return the shared httpx client pointed at the account API."""
    return get_http_client()


def get_session_store(redis: Redis = Depends(get_redis)) -> SessionStore:
    return SessionStore(redis)


def get_account_api(http: httpx.AsyncClient = Depends(get_http)) -> AccountApiClient:
    return AccountApiClient(http)


def get_recovery_service(
    store: SessionStore = Depends(get_session_store),
    api: AccountApiClient = Depends(get_account_api),
) -> RecoveryService:
    """Assemble RecoveryService with its session store and the recovery state machine."""
    return RecoveryService(store=store, flow=PasswordRecoveryFlow(api))


def get_verification_service(
    store: SessionStore = Depends(get_session_store),
    api: AccountApiClient = Depends(get_account_api),
) -> VerificationService:
    return VerificationService(store=store, api=api)

"""Async client for the remote account API used by the recovery flows.

Only the handful of `/users/*` endpoints the portal needs are wrapped here.
Transport, serialization and retry policy belong to httpx; this module's job
is to shape the payloads and to turn failures into `UpstreamError`s that
carry a human-readable message.
"""

import json
from typing import Any, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import UpstreamError
from app.core.logging import get_logger

logger = get_logger(__name__)

_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """Return a lazily initialized httpx client shared across the service."""
    global _http_client
    if _http_client is None:
        _http_client = httpx.AsyncClient(
            base_url=settings.API_BASE_URL.rstrip("/"),
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
            headers={"Content-Type": "application/json"},
        )
    return _http_client


async def close_http_client() -> None:
    """Close the shared httpx client; invoked during application shutdown."""
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


def _bearer(token: str | None) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


def extract_error_message(response: httpx.Response) -> str:
    """Pull the most readable message out of a failed response.

    JSON bodies prefer `message`, then `error`, then the whole body; anything
    else falls back to the raw text, the reason phrase, and finally a generic
    "Request failed".
    """

    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
            if message:
                return str(message)
        if body is not None:
            return json.dumps(body)

    return response.text or response.reason_phrase or "Request failed"


class AccountApiClient:
    """Thin wrapper around the collaborator's user endpoints."""

    def __init__(self, http_client: httpx.AsyncClient, base_path: str = settings.API_BASE_PATH):
        """Receive the shared httpx client (injected by the FastAPI dependency graph)."""
        self.http = http_client
        self.base_path = base_path.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self.base_path}{path}"

    async def _post(self, path: str, payload: dict[str, Any], token: str | None = None) -> Any:
        """POST JSON and return the decoded body, raising `UpstreamError` on failure."""

        try:
            response = await self.http.post(self._url(path), json=payload, headers=_bearer(token))
        except httpx.HTTPError as exc:
            logger.warning("Upstream %s unreachable: %s", path, exc.__class__.__name__)
            raise UpstreamError("", upstream_status=None) from exc

        if response.is_error:
            message = extract_error_message(response)
            logger.info("Upstream %s rejected with %s", path, response.status_code)
            raise UpstreamError(message, upstream_status=response.status_code, body=response.text)

        if "application/json" in response.headers.get("content-type", ""):
            try:
                return response.json()
            except ValueError:
                return None
        return response.text

    # -----------------------
    # Password recovery
    # -----------------------
    async def request_password_reset(self, email: str) -> None:
        await self._post("/users/forgot-password", {"email": email})

    async def verify_reset_code(self, email: str, code: str) -> str | None:
        """Check the emailed reset code; return the reset token when one is issued."""

        body = await self._post("/users/verify-reset-otp", {"email": email, "otp": code})
        if isinstance(body, dict) and body.get("resetToken"):
            return str(body["resetToken"])
        return None

    async def perform_password_reset(
        self,
        email: str,
        code: str,
        new_password: str,
        confirm_password: str,
        reset_token: str | None = None,
    ) -> None:
        """Set the new password; the reset token, if any, travels as a Bearer header."""

        payload = {
            "email": email,
            "otp": code,
            "newPassword": new_password,
            "confirmPassword": confirm_password,
        }
        await self._post("/users/reset-password", payload, token=reset_token)

    # -----------------------
    # Registration verification
    # -----------------------
    async def register(
        self,
        name: str,
        email: str,
        phone_number: str,
        password: str,
        role: str | None = None,
    ) -> dict[str, Any]:
        payload = {
            "name": name.strip(),
            "email": email.strip(),
            "phoneNumber": phone_number.strip(),
            "password": password,
        }
        if role:
            payload["role"] = role.strip()
        body = await self._post("/users/register", payload)
        return body if isinstance(body, dict) else {}

    async def verify_registration_code(self, verification_token: str, code: str) -> None:
        await self._post("/users/verify-registration-otp", {"otp": code}, token=verification_token)

    async def resend_registration_code(self, verification_token: str) -> None:
        await self._post("/users/resend-otp", {}, token=verification_token)

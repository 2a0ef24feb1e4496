"""Sign-up and registration email verification.

The sign-up step stores the verification token it receives in the visitor
session; the verification screen falls back to that stored value when the
link the visitor followed carries no token of its own.
"""

from urllib.parse import quote

from app.core.config import settings
from app.core.exceptions import PreconditionError, UpstreamError
from app.core.logging import get_logger
from app.schemas.auth import RegistrationRequest, RegistrationResult
from app.schemas.common import Message
from app.schemas.otp import VerificationView
from app.services.api_client import AccountApiClient
from app.services.session import SessionStore
from app.services.tokens import resolve_continuation_token

logger = get_logger(__name__)

FORM_NAME = "verify-otp"
MISSING_TOKEN_NOTICE = "Missing verification token. Please open the link from your email which contains the token."
ALLOWED_ROLES = ("agent", "owner")


class VerificationService:
    """Resolve tokens, submit codes, and seed the fallback token at sign-up."""

    def __init__(
        self,
        store: SessionStore,
        api: AccountApiClient,
        password_min_length: int = settings.PASSWORD_MIN_LENGTH,
        signin_path: str = settings.SIGNIN_PATH,
    ):
        self.store = store
        self.api = api
        self.password_min_length = password_min_length
        self.signin_path = signin_path

    async def resolve_token(self, session_id: str, path_token: str | None, query_token: str | None) -> str | None:
        stored = await self.store.get_pending_token(session_id)
        return resolve_continuation_token(path_token, query_token, stored)

    async def view(self, session_id: str, path_token: str | None, query_token: str | None) -> VerificationView:
        token = await self.resolve_token(session_id, path_token, query_token)
        return VerificationView(
            token_present=token is not None,
            notice=None if token else MISSING_TOKEN_NOTICE,
        )

    async def verify(
        self, session_id: str, code: str, path_token: str | None, query_token: str | None
    ) -> VerificationView:
        """Submit the emailed code for the resolved token.

        Without a token nothing is sent upstream. On success the stored
        fallback token is dropped and the visitor is offered a manual
        continuation to sign-in.
        """

        async with self.store.submission_guard(session_id, FORM_NAME):
            token = await self.resolve_token(session_id, path_token, query_token)
            if not token:
                raise PreconditionError("Missing verification token in URL")

            try:
                await self.api.verify_registration_code(token, code)
            except UpstreamError as exc:
                raise exc.with_fallback("OTP verification failed") from exc

            await self.store.clear_pending_token(session_id)

        logger.info("Registration email verified")
        return VerificationView(
            token_present=True,
            success="Email verified! You can now login.",
            continue_to=self.signin_path,
        )

    async def resend(self, session_id: str, path_token: str | None, query_token: str | None) -> Message:
        async with self.store.submission_guard(session_id, FORM_NAME):
            token = await self.resolve_token(session_id, path_token, query_token)
            if not token:
                raise PreconditionError("Missing verification token in URL")
            try:
                await self.api.resend_registration_code(token)
            except UpstreamError as exc:
                raise exc.with_fallback("Failed to resend verification code") from exc
        return Message(message="A new verification code has been sent.")

    async def register(self, session_id: str, payload: RegistrationRequest) -> RegistrationResult:
        """Create the account upstream and remember its verification token for this session."""

        if payload.password != payload.confirm_password:
            raise PreconditionError("Passwords do not match")
        if len(payload.password) < self.password_min_length:
            raise PreconditionError(f"Password must be at least {self.password_min_length} characters")

        role = payload.role.strip().lower() if payload.role else None
        try:
            body = await self.api.register(
                name=payload.name,
                email=payload.email,
                phone_number=payload.phone_number,
                password=payload.password,
                role=role if role in ALLOWED_ROLES else None,
            )
        except UpstreamError as exc:
            raise exc.with_fallback("Registration failed") from exc

        token = body.get("verificationToken")
        next_url = "/verify-otp"
        if token:
            token = str(token)
            await self.store.set_pending_token(session_id, token)
            next_url = f"/verify-otp?token={quote(token, safe='')}"

        user_id = body.get("userId")
        return RegistrationResult(
            success="Registration successful. Please check your email for the verification code.",
            email=body.get("email") or payload.email,
            user_id=str(user_id) if user_id is not None else None,
            next=next_url,
        )

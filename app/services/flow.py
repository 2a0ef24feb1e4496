"""Password recovery state machine: REQUEST -> VERIFY -> RESET.

Each phase is its own frozen dataclass holding only the data valid in that
phase, so a VERIFY step can never read a code and a REQUEST step can never
see an email. Transitions only move forward; a failure leaves the caller
holding the state it passed in.
"""

import json
from dataclasses import asdict, dataclass
from typing import ClassVar, Optional, Union

from app.core.config import settings
from app.core.exceptions import PhaseError, PreconditionError, UpstreamError
from app.core.logging import get_logger
from app.services.api_client import AccountApiClient

logger = get_logger(__name__)


@dataclass(frozen=True)
class RequestPhase:
    name: ClassVar[str] = "request"


@dataclass(frozen=True)
class VerifyPhase:
    email: str
    name: ClassVar[str] = "verify"


@dataclass(frozen=True)
class ResetPhase:
    email: str
    code: str
    continuation_token: Optional[str] = None
    name: ClassVar[str] = "reset"


RecoveryState = Union[RequestPhase, VerifyPhase, ResetPhase]

_PHASES = {cls.name: cls for cls in (RequestPhase, VerifyPhase, ResetPhase)}


def dump_state(state: RecoveryState) -> str:
    """Serialize a phase to JSON tagged with its name."""
    return json.dumps({"phase": state.name, **asdict(state)})


def load_state(raw: Optional[str]) -> RecoveryState:
    """Rebuild a phase from `dump_state` output; anything unreadable restarts the flow."""

    if not raw:
        return RequestPhase()
    try:
        data = json.loads(raw)
        phase_cls = _PHASES[data.pop("phase")]
        return phase_cls(**data)
    except (ValueError, KeyError, TypeError, AttributeError):
        logger.warning("Discarding unreadable recovery state")
        return RequestPhase()


@dataclass
class FlowStep:
    """Result of a successful transition. `state` is None once the flow is finished."""

    state: Optional[RecoveryState]
    message: str
    redirect_to: Optional[str] = None
    redirect_after_ms: Optional[int] = None


class PasswordRecoveryFlow:
    """Drive a visitor through the three recovery phases against the account API."""

    def __init__(
        self,
        api: AccountApiClient,
        password_min_length: int = settings.PASSWORD_MIN_LENGTH,
        enforce_confirmation: bool = settings.ENFORCE_PASSWORD_CONFIRMATION,
        require_reset_token: bool = settings.REQUIRE_RESET_TOKEN,
        signin_path: str = settings.SIGNIN_PATH,
        redirect_delay_ms: int = settings.RESET_REDIRECT_DELAY_MS,
    ):
        self.api = api
        self.password_min_length = password_min_length
        self.enforce_confirmation = enforce_confirmation
        self.require_reset_token = require_reset_token
        self.signin_path = signin_path
        self.redirect_delay_ms = redirect_delay_ms

    @staticmethod
    def _expect(state: RecoveryState, phase_cls: type) -> None:
        if not isinstance(state, phase_cls):
            raise PhaseError(
                f"This step is not available while the recovery is in the '{state.name}' step.",
                phase=state.name,
            )

    async def request_reset(self, state: RecoveryState, email: str) -> FlowStep:
        """REQUEST: ask the account API to email a reset code."""

        self._expect(state, RequestPhase)
        try:
            await self.api.request_password_reset(email)
        except UpstreamError as exc:
            raise exc.with_fallback("Failed to send reset code", phase=RequestPhase.name) from exc

        logger.info("Reset code requested; moving to verify")
        return FlowStep(VerifyPhase(email=email), "OTP code sent. Please check your email.")

    async def verify_code(self, state: RecoveryState, code: str) -> FlowStep:
        """VERIFY: confirm the emailed code and capture the reset token if one is issued."""

        self._expect(state, VerifyPhase)
        try:
            token = await self.api.verify_reset_code(state.email, code)
        except UpstreamError as exc:
            raise exc.with_fallback("OTP verification failed", phase=VerifyPhase.name) from exc

        if token is None:
            logger.warning("Reset code verified but no reset token was issued")
        return FlowStep(
            ResetPhase(email=state.email, code=code, continuation_token=token),
            "OTP verified. Please enter your new password.",
        )

    def _check_passwords(self, new_password: str, confirm_password: str) -> None:
        minimum = self.password_min_length
        if len(new_password) < minimum or len(confirm_password) < minimum:
            raise PreconditionError(f"Password must be at least {minimum} characters", phase=ResetPhase.name)
        if self.enforce_confirmation and new_password != confirm_password:
            raise PreconditionError("Passwords do not match", phase=ResetPhase.name)

    async def reset_password(self, state: RecoveryState, new_password: str, confirm_password: str) -> FlowStep:
        """RESET: submit the new password; success ends the flow with a delayed redirect."""

        self._expect(state, ResetPhase)
        self._check_passwords(new_password, confirm_password)
        if self.require_reset_token and not state.continuation_token:
            raise PreconditionError(
                "Reset session is missing its verification token. Please request a new code.",
                phase=ResetPhase.name,
            )

        try:
            await self.api.perform_password_reset(
                email=state.email,
                code=state.code,
                new_password=new_password,
                confirm_password=confirm_password,
                reset_token=state.continuation_token,
            )
        except UpstreamError as exc:
            raise exc.with_fallback("Failed to reset password", phase=ResetPhase.name) from exc

        logger.info("Password reset completed")
        return FlowStep(
            None,
            "Password has been reset! Redirecting to login...",
            redirect_to=self.signin_path,
            redirect_after_ms=self.redirect_delay_ms,
        )

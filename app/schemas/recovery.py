"""Pydantic schemas for the three-step password recovery screen."""

from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from app.schemas.common import Banner

PhaseName = Literal["request", "verify", "reset", "complete"]


class ForgotPasswordRequest(BaseModel):
    """Payload for the REQUEST step: the account email."""

    email: EmailStr


class ResetCodeVerify(BaseModel):
    """Payload for the VERIFY step; the email is carried by the session."""

    code: str = Field(..., min_length=1)


class PasswordResetSubmit(BaseModel):
    """Payload for the RESET step.

    Only presence is checked here; length and equality are local preconditions
    handled by the flow so they surface as banners.
    """

    new_password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1)


class RecoveryView(Banner):
    """What the recovery screen should render after a request."""

    phase: PhaseName
    email: str | None = None
    redirect_to: str | None = None
    redirect_after_ms: int | None = None

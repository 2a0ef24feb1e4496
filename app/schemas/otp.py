"""Pydantic schemas for the registration email-verification screen."""

from pydantic import BaseModel, Field

from app.core.config import settings
from app.schemas.common import Banner


class RegistrationCodeVerify(BaseModel):
    """Payload used when submitting the emailed registration code."""

    code: str = Field(
        ...,
        min_length=settings.REGISTRATION_CODE_LENGTH,
        max_length=settings.REGISTRATION_CODE_LENGTH,
    )


class VerificationView(Banner):
    """State of the verification screen for the resolved token."""

    token_present: bool
    code_length: int = settings.REGISTRATION_CODE_LENGTH
    notice: str | None = None
    continue_to: str | None = None

"""Pydantic schemas for the sign-up step that precedes email verification."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class RegistrationRequest(BaseModel):
    """Sign-up form; `confirm_password` never leaves the portal."""

    name: str = Field(..., min_length=1)
    email: EmailStr
    phone_number: str = Field(..., min_length=1, alias="phoneNumber")
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1, alias="confirmPassword")
    role: str | None = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name", "phone_number", mode="before")
    @classmethod
    def strip_text(cls, value):
        """Trim before the length check so whitespace-only entries count as empty."""
        return value.strip() if isinstance(value, str) else value


class RegistrationResult(BaseModel):
    """Outcome of a sign-up: where to go next to enter the emailed code."""

    success: str
    email: str | None = None
    user_id: str | None = None
    next: str

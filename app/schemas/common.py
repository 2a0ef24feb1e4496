"""Shared lightweight schemas."""

from pydantic import BaseModel


class Message(BaseModel):
    """Standard response envelope used for plain text messages."""

    message: str


class Banner(BaseModel):
    """Success/error banner pair; at most one of the two is ever set."""

    success: str | None = None
    error: str | None = None

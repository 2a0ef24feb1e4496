"""Application configuration powered by pydantic-settings."""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized strongly-typed configuration loaded from `.env`."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    PROJECT_NAME: str = "Account Recovery Portal"
    PROJECT_VERSION: str = "1.0.0"

    API_BASE_URL: str = Field("http://localhost:5558", description="Root URL of the remote account API")
    API_BASE_PATH: str = "/api/v1"
    UPSTREAM_TIMEOUT_SECONDS: float = 20.0

    REDIS_URL: str = Field("redis://localhost:6379/0", description="Redis URL for visitor session storage")
    SESSION_COOKIE_NAME: str = "recovery_session"
    SESSION_TTL_SECONDS: int = 1800
    # Upper bound on how long an in-flight submission may hold its form
    SUBMISSION_GUARD_SECONDS: int = 30

    SIGNIN_PATH: str = "/login"
    RESET_REDIRECT_DELAY_MS: int = 2000

    PASSWORD_MIN_LENGTH: int = 6
    REGISTRATION_CODE_LENGTH: int = 6
    ENFORCE_PASSWORD_CONFIRMATION: bool = True
    REQUIRE_RESET_TOKEN: bool = False

    ALLOWED_ORIGINS: List[str] = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]

    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Cache and return a singleton Settings instance to avoid re-parsing env."""
    return Settings()


settings = get_settings()

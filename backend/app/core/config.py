# backend/app/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

from .constants import (
    BRAND_NAME,
    DEFAULT_DAILY_SESSION_LIMIT,
    DEFAULT_GYM_CAPACITY,
    DEFAULT_MAX_SESSION_DURATION_MINUTES,
)

logger = logging.getLogger(__name__)

BACKEND_DIR = Path(__file__).resolve().parents[2]

# CI supplies everything through the environment.
if not os.getenv("CI"):
    load_dotenv(BACKEND_DIR / ".env")

DEV_SECRET_KEY = "dev-secret-key-change-me"
CI_SECRET_KEY = "ci-test-secret-key-not-for-production"


def is_running_tests() -> bool:
    """True inside a pytest run (pytest exports PYTEST_CURRENT_TEST per test)."""
    return "PYTEST_CURRENT_TEST" in os.environ


class Settings(BaseSettings):
    """GymBook runtime configuration; every field can be set from the environment."""

    # Auth
    secret_key: SecretStr = SecretStr(CI_SECRET_KEY if os.getenv("CI") else DEV_SECRET_KEY)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 12 * 60

    # Storage
    database_url: str = Field(default="sqlite:///./gymbook.db", alias="DATABASE_URL")

    # Booking rules
    gym_capacity: int = Field(
        default=DEFAULT_GYM_CAPACITY,
        ge=1,
        description="Active sessions allowed to overlap at any instant",
    )
    max_session_duration_minutes: int = Field(
        default=DEFAULT_MAX_SESSION_DURATION_MINUTES,
        ge=1,
        description="Longest bookable session",
    )
    daily_session_limit: int = Field(
        default=DEFAULT_DAILY_SESSION_LIMIT,
        ge=1,
        description="Active sessions one client may start per gym day",
    )
    booking_window_weeks: int = Field(
        default=2,
        ge=1,
        description="Calendar weeks open for booking, counting the current one",
    )
    gym_timezone: str = Field(
        default="UTC",
        description="IANA zone that defines gym days and weeks",
    )

    # Per-day booking lock
    booking_serialization_enabled: bool = False
    slot_lock_ttl_seconds: int = 30
    redis_url: str = "redis://localhost:6379"
    redis_namespace: str = "gymbook"

    # Outbound email
    email_provider: Literal["console", "resend"] = Field(default="console", alias="EMAIL_PROVIDER")
    resend_api_key: str | None = Field(default=None, alias="RESEND_API_KEY")
    from_email: str = f"{BRAND_NAME} <noreply@gymbook.app>"

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )
    is_testing: bool = False

    model_config = SettingsConfigDict(
        env_file=None if os.getenv("CI") else ".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("gym_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @model_validator(mode="after")
    def _require_real_secret_in_production(self) -> "Settings":
        placeholder = self.secret_key.get_secret_value() in {DEV_SECRET_KEY, CI_SECRET_KEY}
        if self.environment == "production" and placeholder:
            raise ValueError("SECRET_KEY must be set in production environments.")
        return self

    def get_database_url(self) -> str:
        """``TEST_DATABASE_URL`` wins over ``DATABASE_URL`` during test runs."""
        if self.is_testing or is_running_tests():
            return os.getenv("TEST_DATABASE_URL") or self.database_url
        return self.database_url


settings = Settings()

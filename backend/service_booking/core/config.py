# backend/service_booking/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug("[CONFIG] Looking for .env at: %s (exists=%s)", env_path, env_path.exists())
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "staging", "production", "test"] = Field(
        default="development",
        description="Deployment environment name",
    )
    is_testing: bool = False  # Set to True when running tests
    log_level: str = Field(default="INFO", description="Root log level")

    # Database
    database_url: str = Field(
        default="sqlite:///./service_booking.db",
        description="SQLAlchemy URL of the booking store",
    )
    test_database_url: str = Field(
        default="sqlite://",
        description="SQLAlchemy URL used while running tests",
    )
    database_echo: bool = False

    # Booking rules
    booking_lead_time_hours: int = Field(
        default=24,
        ge=0,
        description="Minimum notice between booking creation and the appointment",
    )
    cancellation_window_hours: int = Field(
        default=12,
        ge=0,
        description="Minimum notice before the appointment for customer cancellations",
    )
    provider_global_override: bool = Field(
        default=True,
        description=(
            "Let any provider change the status of any booking. Grants made only "
            "through this override are logged at WARNING level."
        ),
    )
    refund_enabled: bool = Field(
        default=True,
        description="Call the refund collaborator after a successful cancellation",
    )

    # Pagination
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    # Seeded administrator
    admin_email: str = Field(default="admin@example.com", description="Seeded administrator email")
    admin_first_name: str = "Platform"
    admin_last_name: str = "Administrator"

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = (value or "INFO").strip().upper()
        if normalized not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @model_validator(mode="after")
    def _check_page_sizes(self) -> "Settings":
        if self.max_page_size < self.default_page_size:
            raise ValueError("max_page_size must be greater than or equal to default_page_size")
        return self

    def get_database_url(self) -> str:
        """Get the appropriate database URL based on context."""
        if self.is_testing or is_running_tests():
            return self.test_database_url
        return self.database_url


settings = Settings()

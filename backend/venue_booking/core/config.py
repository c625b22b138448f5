# backend/venue_booking/core/config.py
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug("[CONFIG] Looking for .env at: %s", env_path)
    load_dotenv(env_path)


PRODUCTION_DATABASE_INDICATORS = (
    "supabase.com",
    "supabase.co",
    "amazonaws.com",
    "database.azure.com",
    "neon.tech",
    "render.com",
)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


class Settings(BaseSettings):
    environment: str = Field(default="development", description="Deployment environment name")

    # Database
    database_url: str = Field(
        default="sqlite+pysqlite:///./venue_booking.db",
        description="SQLAlchemy URL of the relational store",
    )
    test_database_url: str = Field(
        default="sqlite+pysqlite:///:memory:",
        description="SQLAlchemy URL used by the test-suite",
    )
    sql_echo: bool = False
    is_testing: bool = False

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")

    # Scheduling rules
    booking_buffer_minutes: int = Field(
        default=30, ge=0, description="Minimum idle minutes between two bookings"
    )
    day_end_time: str = Field(default="23:59", description="Last minute of a bookable day")
    max_availability_range_days: int = Field(
        default=366, ge=1, description="Longest date range accepted by availability queries"
    )

    # Approval workflow
    conflict_cancellation_reason: str = "Venue has been booked by another event"
    slot_note_template: str = "Booked for event {event_id}"
    transition_note_template: str = "Transition day after event {event_id}"

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("day_end_time")
    @classmethod
    def _validate_day_end(cls, value: str) -> str:
        hours, _, minutes = value.partition(":")
        if not (hours.isdigit() and minutes.isdigit()):
            raise ValueError("day_end_time must be HH:mm")
        if int(hours) > 23 or int(minutes) > 59:
            raise ValueError("day_end_time must be a valid time of day")
        return value

    @field_validator("test_database_url")
    @classmethod
    def validate_test_database(cls, v: str, info: ValidationInfo) -> str:
        """Ensure test database is not a production database."""
        if any(indicator in v.lower() for indicator in PRODUCTION_DATABASE_INDICATORS):
            raise ValueError("Test database URL points at a production database host")
        return v

    def get_database_url(self, override: Optional[str] = None) -> str:
        """Get the appropriate database URL based on context."""
        if override:
            return override
        if self.is_testing or is_running_tests():
            return self.test_database_url
        return self.database_url


settings = Settings()

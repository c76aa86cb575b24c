"""Application configuration via environment variables."""

from __future__ import annotations

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings

log = logging.getLogger("appointments.config")

DEFAULT_TIMEZONE = "America/Los_Angeles"


class Settings(BaseSettings):
    # Business calendar
    business_timezone: str = DEFAULT_TIMEZONE
    default_duration_minutes: int = 30

    # Google Calendar
    google_service_account_json: str = ""  # file path or inline JSON key
    google_calendar_id: str = "primary"
    calendar_timeout_seconds: float = 10.0
    serialize_bookings: bool = True

    # Tool webhook auth
    tool_api_key: str = ""

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "frozen": True}

    @field_validator("business_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            log.warning(
                "Unknown BUSINESS_TIMEZONE %r, falling back to %s", value, DEFAULT_TIMEZONE
            )
            return DEFAULT_TIMEZONE
        return value

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.business_timezone)

    def validate_startup(self) -> list[str]:
        """Validate configuration at startup. Returns warnings."""
        warnings: list[str] = []
        _placeholders = {"path/to/service-account.json"}

        if (
            not self.google_service_account_json
            or self.google_service_account_json in _placeholders
        ):
            warnings.append(
                "GOOGLE_SERVICE_ACCOUNT_JSON not set. Availability checks will fail "
                "until calendar credentials are configured."
            )

        if not self.tool_api_key:
            if self.debug:
                warnings.append("TOOL_API_KEY not set. Tool endpoint is open (DEBUG=true).")
            else:
                warnings.append(
                    "TOOL_API_KEY not set. Tool endpoint is locked in production. "
                    "Set TOOL_API_KEY in .env to enable it."
                )

        if self.calendar_timeout_seconds <= 0:
            warnings.append("CALENDAR_TIMEOUT_SECONDS must be positive; calendar calls will time out.")

        return warnings


settings = Settings()

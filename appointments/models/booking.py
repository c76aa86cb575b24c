"""Pydantic models for the tool webhook request and response."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

# Accepted key aliases, first non-empty value wins.
REQUEST_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("date", "Date", "appointment_date", "date_requested"),
    "time": ("time", "Time", "appointment_time", "time_requested"),
    "duration": ("durationMinutes", "duration", "duration_minutes", "appointment_duration"),
    "customer_name": ("customerName", "customer_name", "customer name"),
    "customer_email": ("customerEmail", "customer_email", "customer email"),
    "customer_phone": ("customerPhone", "customer_phone", "customer phone"),
    "call_timestamp": ("callTimestamp", "call_timestamp"),
    "auto_book": ("autoBook", "auto_book"),
}

_TRUTHY = {"true", "yes", "y", "1", "on"}


def _first_present(data: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


class BookingRequest(BaseModel):
    """Fields collected by the voice agent, after alias normalisation."""

    date: Optional[str] = None
    time: Optional[str] = None
    duration: Any = None  # int or free text, see resolve_duration
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    call_timestamp: Optional[str] = None
    auto_book: bool = False

    @model_validator(mode="before")
    @classmethod
    def _collapse_aliases(cls, data: Any) -> dict:
        if not isinstance(data, dict):
            return {}
        collapsed = {
            field: _first_present(data, keys) for field, keys in REQUEST_ALIASES.items()
        }
        return {k: v for k, v in collapsed.items() if v is not None}

    @field_validator(
        "date",
        "time",
        "customer_name",
        "customer_email",
        "customer_phone",
        "call_timestamp",
        mode="before",
    )
    @classmethod
    def _as_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("auto_book", mode="before")
    @classmethod
    def _lenient_bool(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            return value.strip().lower() in _TRUTHY
        return False


class AppointmentSummary(BaseModel):
    date: str  # YYYY-MM-DD
    time24: str  # HH:mm
    time12: str  # h:mm am
    local: str  # YYYY-MM-DD HH:mm
    iso: str
    time_of_day: str = Field(serialization_alias="timeOfDay")
    duration_minutes: int = Field(serialization_alias="durationMinutes")
    timezone: str


class CallSummary(BaseModel):
    iso: str
    local: str
    time_of_day: str = Field(serialization_alias="timeOfDay")
    timezone: str


class BookingResponse(BaseModel):
    """Body returned for every request, whatever the outcome."""

    is_free: bool = Field(serialization_alias="isFree")
    event_id: Optional[str] = Field(default=None, serialization_alias="eventId")
    message: str
    appointment: Optional[AppointmentSummary] = None
    call: Optional[CallSummary] = None
    need: Optional[list[str]] = None
    error: Optional[str] = None
    html_link: Optional[str] = Field(default=None, serialization_alias="htmlLink")

    def to_json(self) -> dict:
        """Serialise with camelCase keys; optional blocks are omitted when empty."""
        body = self.model_dump(by_alias=True)
        for key in ("appointment", "call", "need", "error", "htmlLink"):
            if body.get(key) is None:
                body.pop(key, None)
        return body

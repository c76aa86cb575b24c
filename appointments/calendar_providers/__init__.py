"""Calendar provider abstractions and implementations."""

from .base import BusyInterval, CalendarError, CalendarEvent, CalendarProvider

__all__ = ["BusyInterval", "CalendarError", "CalendarEvent", "CalendarProvider"]

"""Abstract base class for calendar providers.

Defines the interface for querying busy time and creating events.
Any calendar backend (Google, Outlook, etc.) implements this ABC.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime


class CalendarError(Exception):
    """The calendar backend reported an error for an otherwise valid request."""


@dataclass(frozen=True)
class BusyInterval:
    """An existing commitment on a calendar."""

    start: datetime
    end: datetime


@dataclass
class CalendarEvent:
    """Represents a calendar event to be created."""

    summary: str
    start: datetime
    end: datetime
    description: str = ""
    attendees: list[str] = field(default_factory=list)  # email addresses
    timezone: str = ""


class CalendarProvider(ABC):
    """Abstract calendar backend.

    Subclasses must implement the free/busy query and event creation.
    Both may raise; callers convert failures into tagged results.
    """

    @abstractmethod
    async def get_busy_intervals(
        self,
        calendar_id: str,
        start: datetime,
        end: datetime,
    ) -> list[BusyInterval]:
        """Return busy intervals on the calendar within ``[start, end)``.

        Args:
            calendar_id: The calendar to query.
            start: Beginning of the query range.
            end: End of the query range.

        Returns:
            List of BusyInterval objects, possibly empty.
        """

    @abstractmethod
    async def create_event(
        self, calendar_id: str, event: CalendarEvent
    ) -> dict:
        """Create a calendar event.

        Args:
            calendar_id: The calendar to create the event on.
            event: Event details.

        Returns:
            Dict containing at least ``"event_id"``.
        """

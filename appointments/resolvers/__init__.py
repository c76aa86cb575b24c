"""Pure resolution steps: call context, date, time, duration, window."""

from .context import resolve_call_context
from .dates import resolve_date
from .duration import resolve_duration
from .times import resolve_time
from .window import build_window

__all__ = [
    "build_window",
    "resolve_call_context",
    "resolve_date",
    "resolve_duration",
    "resolve_time",
]

"""Data access layer."""

from __future__ import annotations

from .cache import TTLCache
from .calendar import (
    CalendarBackend,
    CalendarBackendError,
    CalendarRequestError,
    GoogleCalendarBackend,
    GoogleCredentials,
    MemoryCalendarBackend,
    build_backend,
)

__all__ = [
    "CalendarBackend",
    "CalendarBackendError",
    "CalendarRequestError",
    "GoogleCalendarBackend",
    "GoogleCredentials",
    "MemoryCalendarBackend",
    "TTLCache",
    "build_backend",
]

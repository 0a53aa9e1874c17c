"""Remote calendar collaborators."""

from __future__ import annotations

from ...config.settings import AppSettings
from .base import CalendarBackend, CalendarBackendError, CalendarRequestError
from .google import GoogleCalendarBackend, GoogleCredentials
from .memory import MemoryCalendarBackend


def build_backend(settings: AppSettings) -> CalendarBackend:
    if settings.calendar.backend == "memory":
        return MemoryCalendarBackend()
    if settings.calendar.backend == "google":
        return GoogleCalendarBackend.from_settings(settings.calendar, timezone_name=settings.scheduling.timezone)
    raise CalendarBackendError(f"Unknown calendar backend: {settings.calendar.backend}")


__all__ = [
    "CalendarBackend",
    "CalendarBackendError",
    "CalendarRequestError",
    "GoogleCalendarBackend",
    "GoogleCredentials",
    "MemoryCalendarBackend",
    "build_backend",
]

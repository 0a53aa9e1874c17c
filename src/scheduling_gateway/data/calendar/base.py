from __future__ import annotations

import abc
from datetime import datetime
from typing import List, Optional

from ...domain import BookingRecord, BusyInterval


class CalendarBackendError(RuntimeError):
    """Base error raised by remote calendar backends."""


class CalendarRequestError(CalendarBackendError):
    """Raised when the remote calendar rejects a request with a transport status."""

    def __init__(self, *, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Calendar request failed ({status_code}): {message}")


class CalendarBackend(abc.ABC):
    """Contract the gateway consumes from the remote calendar service."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        ...

    @abc.abstractmethod
    async def list_busy(self, calendar_id: str, start: datetime, end: datetime) -> List[BusyInterval]:
        """Return the occupied ranges of ``calendar_id`` overlapping ``[start, end)``."""

    @abc.abstractmethod
    async def insert(
        self,
        calendar_id: str,
        start: datetime,
        end: datetime,
        summary: str,
        description: str,
        *,
        location: Optional[str] = None,
    ) -> str:
        """Create an event and return its identifier."""

    @abc.abstractmethod
    async def delete(self, calendar_id: str, event_id: str) -> None:
        ...

    @abc.abstractmethod
    async def list_events(self, calendar_id: str, start: datetime, end: datetime) -> List[BookingRecord]:
        """Return single (expanded) events in ``[start, end)`` ordered by start."""

    async def aclose(self) -> None:
        return None

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from uuid import uuid4

from ...domain import BookingRecord, BusyInterval
from .base import CalendarBackend, CalendarRequestError


@dataclass
class MemoryCalendarBackend(CalendarBackend):
    """Process-local calendar used for local runs and tests."""

    events: Dict[str, Dict[str, BookingRecord]] = field(default_factory=dict)
    calls: Counter = field(default_factory=Counter)
    forbidden_calendars: set[str] = field(default_factory=set)

    @property
    def name(self) -> str:
        return "memory"

    def _calendar(self, calendar_id: str) -> Dict[str, BookingRecord]:
        if calendar_id in self.forbidden_calendars:
            raise CalendarRequestError(status_code=403, message=f"No access to calendar {calendar_id}")
        return self.events.setdefault(calendar_id, {})

    def add_event(self, record: BookingRecord) -> BookingRecord:
        self.events.setdefault(record.calendar_id, {})[record.id] = record
        return record

    async def list_busy(self, calendar_id: str, start: datetime, end: datetime) -> List[BusyInterval]:
        self.calls["list_busy"] += 1
        return [
            BusyInterval(record.start, record.end)
            for record in self._overlapping(calendar_id, start, end)
        ]

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
        self.calls["insert"] += 1
        calendar = self._calendar(calendar_id)
        identifier = uuid4().hex
        calendar[identifier] = BookingRecord(
            id=identifier,
            start=start,
            end=end,
            calendar_id=calendar_id,
            summary=summary,
            description=description,
            location=location,
        )
        return identifier

    async def delete(self, calendar_id: str, event_id: str) -> None:
        self.calls["delete"] += 1
        calendar = self._calendar(calendar_id)
        if event_id not in calendar:
            raise CalendarRequestError(status_code=404, message=f"Event {event_id} not found")
        del calendar[event_id]

    async def list_events(self, calendar_id: str, start: datetime, end: datetime) -> List[BookingRecord]:
        self.calls["list_events"] += 1
        return self._overlapping(calendar_id, start, end)

    def _overlapping(self, calendar_id: str, start: datetime, end: datetime) -> List[BookingRecord]:
        records = [
            record
            for record in self._calendar(calendar_id).values()
            if record.start < end and record.end > start
        ]
        return sorted(records, key=lambda record: record.start)

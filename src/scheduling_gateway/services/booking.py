from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..core import parse_local, parse_timestamp, to_iso
from ..domain import (
    BookingRecord,
    EventNotFound,
    InPast,
    InvalidRange,
    InvalidWhen,
    MissingCalendarReference,
    MissingParam,
)
from .context import ServiceContext
from .identity import CalendarTarget, IdentityResolver
from .remote import calendar_errors

logger = logging.getLogger(__name__)

SUMMARY_PREFIX = "Appointment with "
_PHONE_NOISE = re.compile(r"[^\d+]")


def normalize_phone(value: Optional[str]) -> str:
    return _PHONE_NOISE.sub("", str(value or ""))


def idempotency_key(token: str) -> str:
    return f"calendar:create:{token}"


def _who_from_summary(summary: str) -> str:
    if summary.startswith(SUMMARY_PREFIX):
        return summary[len(SUMMARY_PREFIX):].strip()
    return summary


@dataclass(slots=True)
class BookingOrchestrator:
    """Create, cancel and look up appointments on the remote calendar."""

    context: ServiceContext
    identity: IdentityResolver

    def _resolve_start(self, when: Optional[str], day: Optional[str], clock: Optional[str]) -> datetime:
        tz = self.context.tz
        if when:
            try:
                start = parse_timestamp(when, tz)
            except ValueError as exc:
                raise InvalidWhen(when) from exc
        elif day and clock:
            try:
                start = parse_local(day, clock, tz)
            except ValueError as exc:
                raise InvalidWhen(f"{day} {clock}") from exc
        else:
            raise MissingParam("when")
        if start <= self.context.now():
            raise InPast(details={"when": to_iso(start, tz)})
        return start

    async def create(
        self,
        *,
        who: Optional[str],
        when: Optional[str] = None,
        date: Optional[str] = None,
        time: Optional[str] = None,
        notes: Optional[str] = None,
        phone: Optional[str] = None,
        duration_minutes: Optional[int] = None,
        calendar_id: Optional[str] = None,
        resource: Optional[str] = None,
        client_request_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        start = self._resolve_start(when, date, time)
        if not who or not who.strip():
            raise MissingParam("who")
        target = self.identity.target(calendar_id=calendar_id, resource=resource)
        default_minutes = self.context.settings.scheduling.default_slot_minutes
        minutes = default_minutes if duration_minutes is None else duration_minutes
        if minutes <= 0:
            raise InvalidRange("duration must be positive")
        end = start + timedelta(minutes=minutes)

        if not client_request_id:
            return await self._insert(target, start, end, who.strip(), notes, phone)

        key = idempotency_key(client_request_id)
        async with self.context.exclusive(key):
            cached = self.context.cache.get(key)
            if cached is not None:
                logger.info("Returning stored booking for request %s", client_request_id)
                return cached
            result = await self._insert(target, start, end, who.strip(), notes, phone)
            self.context.cache.set(key, result, self.context.settings.scheduling.idempotency_ttl_seconds)
            return result

    async def _insert(
        self,
        target: CalendarTarget,
        start: datetime,
        end: datetime,
        who: str,
        notes: Optional[str],
        phone: Optional[str],
    ) -> Dict[str, Any]:
        with calendar_errors(target.calendar_id):
            event_id = await self.context.calendar.insert(
                target.calendar_id,
                start,
                end,
                f"{SUMMARY_PREFIX}{who}",
                notes or "",
                location=phone or None,
            )
        tz = self.context.tz
        logger.info("Created event %s on %s at %s", event_id, target.calendar_id, start.isoformat())
        return {
            "id": event_id,
            "when": to_iso(start, tz),
            "start": to_iso(start, tz),
            "end": to_iso(end, tz),
            "who": who,
            "notes": notes or "",
            "phone": phone or None,
            "calendar_id": target.calendar_id,
            "resource": target.label,
        }

    async def cancel(
        self,
        *,
        event_id: Optional[str],
        calendar_id: Optional[str] = None,
        resource: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not event_id:
            raise MissingParam("event_id")
        target = self.identity.target(calendar_id=calendar_id, resource=resource)
        with calendar_errors(
            target.calendar_id,
            not_found=lambda: EventNotFound(details={"event_id": event_id}),
        ):
            await self.context.calendar.delete(target.calendar_id, event_id)
        logger.info("Cancelled event %s on %s", event_id, target.calendar_id)
        return {"id": event_id, "cancelled": True, "calendar_id": target.calendar_id}

    def _search_window(self, start: Optional[str], end: Optional[str]) -> tuple[datetime, datetime]:
        tz = self.context.tz
        now = self.context.now()
        span = timedelta(days=self.context.settings.scheduling.search_window_days)
        try:
            window_start = parse_timestamp(start, tz) if start else now - span
            window_end = parse_timestamp(end, tz) if end else now + span
        except ValueError as exc:
            raise InvalidRange(f"Invalid date range: {start!r} to {end!r}") from exc
        if window_end <= window_start:
            raise InvalidRange("The end of the range must be after its start")
        return window_start, window_end

    def _search_targets(self, calendar_id: Optional[str], resource: Optional[str]) -> List[CalendarTarget]:
        if calendar_id or resource:
            return [self.identity.target(calendar_id=calendar_id, resource=resource)]
        targets = [
            CalendarTarget(calendar_id=str(item.calendar_id), resource=item)
            for item in self.context.calendars()
        ]
        if not targets:
            raise MissingCalendarReference("No resource has a calendar reference configured")
        return targets

    async def search(
        self,
        *,
        phone: Optional[str] = None,
        client_id: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        calendar_id: Optional[str] = None,
        resource: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Find bookings whose location or description mentions the caller.

        Every targeted calendar is queried; one failing calendar fails the call.
        """

        wanted_phone = normalize_phone(phone)
        wanted_client = str(client_id or "").strip().lower()
        if not wanted_phone and not wanted_client:
            raise MissingParam("phone", "client_id")
        window_start, window_end = self._search_window(start, end)

        found: List[tuple[BookingRecord, CalendarTarget]] = []
        for target in self._search_targets(calendar_id, resource):
            with calendar_errors(target.calendar_id):
                events = await self.context.calendar.list_events(target.calendar_id, window_start, window_end)
            found.extend(
                (record, target)
                for record in events
                if _matches(record, wanted_phone, wanted_client)
            )

        found.sort(key=lambda item: item[0].start)
        tz = self.context.tz
        logger.info("Booking search matched %d events", len(found))
        return [
            {
                "id": record.id,
                "start": to_iso(record.start, tz),
                "end": to_iso(record.end, tz),
                "resource": target.label,
                "who": _who_from_summary(record.summary),
                "notes": record.description,
            }
            for record, target in found
        ]


def _matches(record: BookingRecord, phone: str, client_id: str) -> bool:
    location = record.location or ""
    description = (record.description or "").lower()
    if phone and (phone in normalize_phone(location) or phone in description):
        return True
    if client_id and (client_id in location.lower() or client_id in description):
        return True
    return False

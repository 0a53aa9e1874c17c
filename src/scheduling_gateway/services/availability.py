from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from ..core import local_days, local_window, parse_timestamp, slots_for_window, to_utc
from ..domain import BusinessHours, BusyInterval, InvalidRange, Slot
from .context import ServiceContext
from .identity import CalendarTarget, IdentityResolver
from .remote import calendar_errors

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AvailabilityResult:
    target: CalendarTarget
    start: datetime
    end: datetime
    duration: timedelta
    buffer: timedelta
    hours: BusinessHours
    slots: tuple[Slot, ...]


def availability_cache_key(
    calendar_id: str, start: datetime, end: datetime, duration: timedelta, buffer: timedelta
) -> str:
    return ":".join(
        [
            "availability",
            calendar_id,
            to_utc(start).isoformat(),
            to_utc(end).isoformat(),
            str(int(duration.total_seconds())),
            str(int(buffer.total_seconds())),
        ]
    )


@dataclass(slots=True)
class AvailabilityEngine:
    context: ServiceContext
    identity: IdentityResolver

    def _parse_range(self, start: Optional[str], end: Optional[str]) -> tuple[datetime, datetime]:
        try:
            start_dt = parse_timestamp(start or "", self.context.tz)
            end_dt = parse_timestamp(end or "", self.context.tz)
        except ValueError as exc:
            raise InvalidRange(f"Invalid date range: {start!r} to {end!r}") from exc
        if end_dt <= start_dt:
            raise InvalidRange("The end of the range must be after its start")
        return start_dt, end_dt

    async def check(
        self,
        *,
        start: Optional[str],
        end: Optional[str],
        duration_minutes: Optional[int] = None,
        buffer_minutes: Optional[int] = None,
        calendar_id: Optional[str] = None,
        resource: Optional[str] = None,
    ) -> AvailabilityResult:
        scheduling = self.context.settings.scheduling
        range_start, range_end = self._parse_range(start, end)
        duration = timedelta(
            minutes=scheduling.default_slot_minutes if duration_minutes is None else duration_minutes
        )
        buffer = timedelta(minutes=scheduling.default_buffer_minutes if buffer_minutes is None else buffer_minutes)
        if duration <= timedelta(0) or buffer < timedelta(0):
            raise InvalidRange("duration must be positive and buffer non-negative")

        target = self.identity.target(calendar_id=calendar_id, resource=resource)
        key = availability_cache_key(target.calendar_id, range_start, range_end, duration, buffer)
        cached = self.context.cache.get(key)
        if cached is not None:
            logger.debug("Availability cache hit for %s", key)
            return cached

        with calendar_errors(target.calendar_id):
            busy = await self.context.calendar.list_busy(target.calendar_id, range_start, range_end)
        hours = self.context.hours_for(target.resource_id)
        slots = self.compute_slots(
            busy=busy,
            hours=hours,
            start=range_start,
            end=range_end,
            duration=duration,
            buffer=buffer,
        )
        result = AvailabilityResult(
            target=target,
            start=range_start,
            end=range_end,
            duration=duration,
            buffer=buffer,
            hours=hours,
            slots=tuple(slots),
        )
        ttl = scheduling.availability_cache_ttl_seconds
        if ttl > 0:
            self.context.cache.set(key, result, ttl)
        logger.info(
            "Computed %d slots for %s between %s and %s",
            len(slots),
            target.calendar_id,
            range_start.isoformat(),
            range_end.isoformat(),
        )
        return result

    def compute_slots(
        self,
        *,
        busy: Sequence[BusyInterval],
        hours: BusinessHours,
        start: datetime,
        end: datetime,
        duration: timedelta,
        buffer: timedelta,
    ) -> List[Slot]:
        """Walk each open day in ``[start, end)`` and pack slots into its free gaps."""

        tz = self.context.tz
        range_start, range_end = to_utc(start), to_utc(end)
        now = to_utc(self.context.now())
        slots: list[Slot] = []
        for day in local_days(range_start, range_end, tz):
            if not hours.is_open_on(day.isoweekday()):
                continue
            opens, closes = local_window(day, hours.start, hours.end, tz)
            window_start = max(opens, range_start)
            window_end = min(closes, range_end)
            slots.extend(
                slots_for_window(
                    busy,
                    window_start,
                    window_end,
                    duration=duration,
                    buffer=buffer,
                    not_before=now,
                )
            )
        return slots

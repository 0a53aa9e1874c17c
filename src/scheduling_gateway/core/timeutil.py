from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Iterator
from zoneinfo import ZoneInfo


@lru_cache(maxsize=16)
def get_zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def parse_timestamp(value: str, tz: tzinfo) -> datetime:
    """Parse an ISO-8601 timestamp, interpreting naive values in ``tz``.

    Raises ``ValueError`` when the value cannot be parsed.
    """

    text = str(value).strip()
    if not text:
        raise ValueError("Empty timestamp")
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def parse_local(day: str, clock: str, tz: tzinfo) -> datetime:
    """Combine a ``YYYY-MM-DD`` date and an ``HH:MM`` time in ``tz``."""

    return datetime.combine(date.fromisoformat(day.strip()), time.fromisoformat(clock.strip()), tzinfo=tz)


def local_days(start: datetime, end: datetime, tz: tzinfo) -> Iterator[date]:
    """Yield each calendar day in ``tz`` that intersects ``[start, end)``."""

    if end <= start:
        return
    first = start.astimezone(tz).date()
    last = (end - timedelta(microseconds=1)).astimezone(tz).date()
    current = first
    while current <= last:
        yield current
        current += timedelta(days=1)


def local_window(day: date, opens: time, closes: time, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return the UTC bounds of ``[opens, closes)`` on ``day`` in ``tz``."""

    start = datetime.combine(day, opens, tzinfo=tz).astimezone(timezone.utc)
    end = datetime.combine(day, closes, tzinfo=tz).astimezone(timezone.utc)
    return start, end


def to_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


def to_iso(value: datetime, tz: tzinfo) -> str:
    return value.astimezone(tz).isoformat(timespec="seconds")

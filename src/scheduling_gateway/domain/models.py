from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Dict, FrozenSet, Optional, Tuple

_DAY_NAMES = {
    "mon": 1,
    "tue": 2,
    "wed": 3,
    "thu": 4,
    "fri": 5,
    "sat": 6,
    "sun": 7,
}


def _parse_day(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Unsupported weekday value: {value!r}")
    if isinstance(value, int):
        if 1 <= value <= 7:
            return value
        raise ValueError(f"Weekday must be between 1 (Monday) and 7 (Sunday): {value}")
    if isinstance(value, str):
        key = value.strip().lower()[:3]
        if key in _DAY_NAMES:
            return _DAY_NAMES[key]
        if key.isdigit():
            return _parse_day(int(key))
    raise ValueError(f"Unsupported weekday value: {value!r}")


def _parse_clock(value: Any) -> time:
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        return time.fromisoformat(value.strip())
    raise ValueError(f"Unsupported time-of-day value: {value!r}")


@dataclass(frozen=True, slots=True)
class BusyInterval:
    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class Slot:
    start: datetime
    end: datetime


@dataclass(frozen=True, slots=True)
class BusinessHours:
    days: FrozenSet[int]
    start: time
    end: time
    source: str = "fallback"

    @classmethod
    def from_record(cls, record: Dict[str, Any], *, source: str) -> "BusinessHours":
        days = frozenset(_parse_day(day) for day in record.get("days") or [])
        start = _parse_clock(record["start"])
        end = _parse_clock(record["end"])
        if end <= start:
            raise ValueError(f"Business hours for {source!r} close before they open")
        return cls(days=days, start=start, end=end, source=source)

    def is_open_on(self, weekday: int) -> bool:
        return weekday in self.days

    def to_dict(self) -> Dict[str, Any]:
        return {
            "days": sorted(self.days),
            "start": self.start.strftime("%H:%M"),
            "end": self.end.strftime("%H:%M"),
            "source": self.source,
        }


FALLBACK_HOURS = BusinessHours(
    days=frozenset({1, 2, 3, 4, 5, 6}),
    start=time(9, 0),
    end=time(18, 0),
    source="fallback",
)


@dataclass(frozen=True, slots=True)
class ResourceIdentity:
    id: str
    display_name: str
    aliases: Tuple[str, ...] = ()
    calendar_id: Optional[str] = None

    @classmethod
    def from_record(cls, resource_id: str, record: Dict[str, Any]) -> "ResourceIdentity":
        aliases = record.get("aliases") or []
        return cls(
            id=str(resource_id),
            display_name=str(record.get("displayName") or record.get("name") or resource_id),
            aliases=tuple(str(alias) for alias in aliases if alias),
            calendar_id=record.get("calendarId") or record.get("calendar_id"),
        )


@dataclass(frozen=True, slots=True)
class ResolvedResource:
    resource_id: str
    display_name: str

    def to_dict(self) -> Dict[str, str]:
        return {"resource_id": self.resource_id, "display_name": self.display_name}


@dataclass(slots=True)
class BookingRecord:
    id: str
    start: datetime
    end: datetime
    calendar_id: str
    summary: str = ""
    description: str = ""
    location: Optional[str] = None

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from ..domain import BusyInterval, Slot

Gap = Tuple[datetime, datetime]


def expand_intervals(intervals: Iterable[BusyInterval], buffer: timedelta) -> List[BusyInterval]:
    """Widen every interval by ``buffer`` on both ends."""

    if buffer < timedelta(0):
        raise ValueError("buffer must be non-negative")
    return [BusyInterval(item.start - buffer, item.end + buffer) for item in intervals]


def clip_intervals(
    intervals: Iterable[BusyInterval],
    window_start: datetime,
    window_end: datetime,
) -> List[BusyInterval]:
    clipped: list[BusyInterval] = []
    for item in intervals:
        start = max(item.start, window_start)
        end = min(item.end, window_end)
        if start < end:
            clipped.append(BusyInterval(start, end))
    return clipped


def merge_intervals(intervals: Iterable[BusyInterval]) -> List[BusyInterval]:
    """Sort and coalesce overlapping or touching intervals.

    Empty intervals are dropped, so the result is sorted, pairwise disjoint,
    and merging it again returns it unchanged.
    """

    ordered = sorted((item for item in intervals if item.start < item.end), key=lambda item: (item.start, item.end))
    merged: list[BusyInterval] = []
    for item in ordered:
        if merged and item.start <= merged[-1].end:
            last = merged[-1]
            if item.end > last.end:
                merged[-1] = BusyInterval(last.start, item.end)
            continue
        merged.append(item)
    return merged


def free_gaps(busy: Iterable[BusyInterval], window_start: datetime, window_end: datetime) -> List[Gap]:
    """Complement of ``busy`` inside ``[window_start, window_end)``."""

    gaps: list[Gap] = []
    cursor = window_start
    for item in merge_intervals(clip_intervals(busy, window_start, window_end)):
        if item.start > cursor:
            gaps.append((cursor, item.start))
        cursor = max(cursor, item.end)
    if cursor < window_end:
        gaps.append((cursor, window_end))
    return gaps


def pack_slots(gap: Gap, duration: timedelta, *, not_before: Optional[datetime] = None) -> List[Slot]:
    """Back-to-back slots of exactly ``duration`` on a grid anchored at the gap start.

    When ``not_before`` falls inside the gap, the first slot starts at the next
    grid boundary at or after it.
    """

    if duration <= timedelta(0):
        raise ValueError("duration must be positive")
    gap_start, gap_end = gap
    cursor = gap_start
    if not_before is not None and not_before > cursor:
        elapsed = not_before - gap_start
        steps = -(-elapsed // duration)
        cursor = gap_start + steps * duration
    slots: list[Slot] = []
    while cursor + duration <= gap_end:
        slots.append(Slot(cursor, cursor + duration))
        cursor += duration
    return slots


def slots_for_window(
    busy: Iterable[BusyInterval],
    window_start: datetime,
    window_end: datetime,
    *,
    duration: timedelta,
    buffer: timedelta = timedelta(0),
    not_before: Optional[datetime] = None,
) -> List[Slot]:
    """Slots for one business-hours window, all datetimes expected in UTC."""

    if window_end <= window_start:
        return []
    expanded = expand_intervals(busy, buffer)
    slots: list[Slot] = []
    for gap in free_gaps(expanded, window_start, window_end):
        slots.extend(pack_slots(gap, duration, not_before=not_before))
    return slots

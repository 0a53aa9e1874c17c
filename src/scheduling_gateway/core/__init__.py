"""Pure scheduling arithmetic and time helpers."""

from __future__ import annotations

from .scheduler import (
    clip_intervals,
    expand_intervals,
    free_gaps,
    merge_intervals,
    pack_slots,
    slots_for_window,
)
from .timeutil import (
    get_zone,
    local_days,
    local_window,
    parse_local,
    parse_timestamp,
    to_iso,
    to_utc,
)

__all__ = [
    "clip_intervals",
    "expand_intervals",
    "free_gaps",
    "get_zone",
    "local_days",
    "local_window",
    "merge_intervals",
    "pack_slots",
    "parse_local",
    "parse_timestamp",
    "slots_for_window",
    "to_iso",
    "to_utc",
]

from __future__ import annotations

from enum import Enum


class ToolName(str, Enum):
    HEALTH = "health"
    RESOURCES = "resources"
    AVAILABILITY = "availability"
    CALENDAR = "calendar"
    BOOKING = "booking"


class ErrorCode(str, Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_ENVELOPE = "INVALID_ENVELOPE"
    MISSING_PARAM = "MISSING_PARAM"
    INVALID_RANGE = "INVALID_RANGE"
    INVALID_WHEN = "INVALID_WHEN"
    IN_PAST = "IN_PAST"
    NOT_FOUND = "NOT_FOUND"
    AMBIGUOUS = "AMBIGUOUS"
    INTERNAL_ID_USED = "INTERNAL_ID_USED"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    MISSING_CALENDAR_REFERENCE = "MISSING_CALENDAR_REFERENCE"
    FORBIDDEN = "FORBIDDEN"
    UNKNOWN_ROUTE = "UNKNOWN_ROUTE"
    INTERNAL = "INTERNAL"

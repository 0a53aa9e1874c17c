from __future__ import annotations

from datetime import tzinfo
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..core import to_iso
from ..domain import BusinessHours, ResolvedResource
from ..services import AvailabilityResult


class ToolCallEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    tool: str = Field(min_length=1)
    action: str = Field(min_length=1)
    params: Dict[str, Any] = Field(default_factory=dict)
    request_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("requestId", "request_id"),
    )


class ToolParams(BaseModel):
    """Base for action params: snake_case or camelCase, unknown keys ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EmptyParams(ToolParams):
    pass


class ResolveParams(ToolParams):
    name: str


class AvailabilityParams(ToolParams):
    start: str = Field(validation_alias=AliasChoices("from", "start"))
    end: str = Field(validation_alias=AliasChoices("to", "end"))
    duration: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("duration", "duration_minutes", "durationMinutes"),
    )
    buffer: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("buffer", "buffer_minutes", "bufferMinutes"),
    )
    calendar_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("calendar_id", "calendarId"))
    resource: Optional[str] = None


class CreateParams(ToolParams):
    who: str
    when: Optional[str] = None
    day: Optional[str] = Field(default=None, validation_alias=AliasChoices("date", "day"))
    clock: Optional[str] = Field(default=None, validation_alias=AliasChoices("time", "clock"))
    notes: Optional[str] = None
    phone: Optional[str] = None
    duration: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("duration", "duration_minutes", "durationMinutes"),
    )
    calendar_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("calendar_id", "calendarId"))
    resource: Optional[str] = None
    client_request_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("client_request_id", "clientRequestId"),
    )


class CancelParams(ToolParams):
    event_id: str = Field(validation_alias=AliasChoices("event_id", "eventId"))
    calendar_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("calendar_id", "calendarId"))
    resource: Optional[str] = None


class SearchParams(ToolParams):
    phone: Optional[str] = None
    client_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("client_id", "clientId"))
    start: Optional[str] = Field(default=None, validation_alias=AliasChoices("from", "start"))
    end: Optional[str] = Field(default=None, validation_alias=AliasChoices("to", "end"))
    calendar_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("calendar_id", "calendarId"))
    resource: Optional[str] = None


class ResourcePayload(BaseModel):
    resource_id: str
    display_name: str

    @classmethod
    def from_domain(cls, resource: ResolvedResource) -> "ResourcePayload":
        return cls(resource_id=resource.resource_id, display_name=resource.display_name)


class SlotPayload(BaseModel):
    start: str
    end: str


class BusinessHoursPayload(BaseModel):
    days: List[int]
    start: str
    end: str
    source: str

    @classmethod
    def from_domain(cls, hours: BusinessHours) -> "BusinessHoursPayload":
        return cls(**hours.to_dict())


class AvailabilityPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    calendar_id: str
    resource: str
    timezone: str
    start: str = Field(serialization_alias="from")
    end: str = Field(serialization_alias="to")
    duration_minutes: int
    buffer_minutes: int
    business_hours: BusinessHoursPayload
    slots: List[SlotPayload]

    @classmethod
    def from_domain(cls, result: AvailabilityResult, tz: tzinfo) -> "AvailabilityPayload":
        return cls(
            calendar_id=result.target.calendar_id,
            resource=result.target.label,
            timezone=str(tz),
            start=to_iso(result.start, tz),
            end=to_iso(result.end, tz),
            duration_minutes=int(result.duration.total_seconds() // 60),
            buffer_minutes=int(result.buffer.total_seconds() // 60),
            business_hours=BusinessHoursPayload.from_domain(result.hours),
            slots=[SlotPayload(start=to_iso(slot.start, tz), end=to_iso(slot.end, tz)) for slot in result.slots],
        )

from __future__ import annotations

from typing import Any, Dict

from ..domain import ToolName
from .models import CancelParams, CreateParams
from .registry import register_action
from .state import ApiState


@register_action(
    ToolName.CALENDAR,
    "create",
    params=CreateParams,
    description=(
        "Book an appointment at `when` (or `date` + `time` in the configured timezone). "
        "Repeating a `client_request_id` returns the stored booking."
    ),
    cacheable=True,
    tags=("calendar", "booking"),
)
async def create(state: ApiState, params: CreateParams) -> Dict[str, Any]:
    return await state.booking.create(
        who=params.who,
        when=params.when,
        date=params.day,
        time=params.clock,
        notes=params.notes,
        phone=params.phone,
        duration_minutes=params.duration,
        calendar_id=params.calendar_id,
        resource=params.resource,
        client_request_id=params.client_request_id,
    )


@register_action(
    ToolName.CALENDAR,
    "cancel",
    params=CancelParams,
    description="Cancel an existing appointment by event id.",
    tags=("calendar", "booking"),
)
async def cancel(state: ApiState, params: CancelParams) -> Dict[str, Any]:
    return await state.booking.cancel(
        event_id=params.event_id,
        calendar_id=params.calendar_id,
        resource=params.resource,
    )

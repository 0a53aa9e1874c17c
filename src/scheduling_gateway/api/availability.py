from __future__ import annotations

from typing import Any, Dict

from ..domain import ToolName
from .models import AvailabilityParams
from .registry import register_action
from .serializers import serialize_availability
from .state import ApiState


@register_action(
    ToolName.AVAILABILITY,
    "check",
    params=AvailabilityParams,
    description=(
        "Compute bookable slots in [from, to) for a calendar or a named resource, "
        "honouring business hours, an optional buffer and the slot duration."
    ),
    cacheable=True,
    tags=("availability", "slots"),
)
async def check(state: ApiState, params: AvailabilityParams) -> Dict[str, Any]:
    result = await state.availability.check(
        start=params.start,
        end=params.end,
        duration_minutes=params.duration,
        buffer_minutes=params.buffer,
        calendar_id=params.calendar_id,
        resource=params.resource,
    )
    return serialize_availability(result, state.context.tz)

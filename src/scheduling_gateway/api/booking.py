from __future__ import annotations

from typing import Any, Dict, List

from ..domain import ToolName
from .models import SearchParams
from .registry import register_action
from .state import ApiState


@register_action(
    ToolName.BOOKING,
    "search",
    params=SearchParams,
    description=(
        "Find past and upcoming appointments by phone number or client id. "
        "Defaults to a window around today across every configured calendar."
    ),
    cacheable=True,
    tags=("booking", "search"),
)
async def search(state: ApiState, params: SearchParams) -> List[Dict[str, Any]]:
    return await state.booking.search(
        phone=params.phone,
        client_id=params.client_id,
        start=params.start,
        end=params.end,
        calendar_id=params.calendar_id,
        resource=params.resource,
    )

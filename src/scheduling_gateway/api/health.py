from __future__ import annotations

from typing import Any, Dict

from ..core import to_iso
from ..domain import ToolName
from .models import EmptyParams
from .registry import register_action
from .state import ApiState


@register_action(
    ToolName.HEALTH,
    "ping",
    params=EmptyParams,
    description="Liveness check returning the gateway clock in the configured timezone.",
    tags=("health",),
)
async def ping(state: ApiState, params: EmptyParams) -> Dict[str, Any]:
    context = state.context
    return {"pong": True, "now": to_iso(context.now(), context.tz)}

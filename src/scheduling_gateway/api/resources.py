from __future__ import annotations

from typing import Any, Dict, List

from ..domain import ToolName
from .models import EmptyParams, ResolveParams
from .registry import register_action
from .serializers import serialize_resource
from .state import ApiState


@register_action(
    ToolName.RESOURCES,
    "resolve",
    params=ResolveParams,
    description=(
        "Resolve a free-text staff name to exactly one resource. Fails with NOT_FOUND, "
        "AMBIGUOUS (with candidate options) or INTERNAL_ID_USED."
    ),
    cacheable=True,
    tags=("resources", "identity"),
)
async def resolve(state: ApiState, params: ResolveParams) -> Dict[str, Any]:
    return serialize_resource(state.identity.resolve(params.name))


@register_action(
    ToolName.RESOURCES,
    "list",
    params=EmptyParams,
    description="List the configured resources with their public names and aliases.",
    cacheable=True,
    tags=("resources",),
)
async def list_resources(state: ApiState, params: EmptyParams) -> List[Dict[str, Any]]:
    return state.identity.listing()

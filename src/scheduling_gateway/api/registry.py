from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Iterable, List, Optional, Type

from pydantic import BaseModel, ValidationError

from ..domain import InvalidEnvelope, MissingParam, ToolName, UnknownRoute

if TYPE_CHECKING:
    from .state import ApiState

JsonSchema = Dict[str, Any]
Handler = Callable[["ApiState", Any], Awaitable[Any]]


@dataclass(frozen=True)
class ToolAction:
    tool: ToolName
    name: str
    handler: Handler
    params_model: Type[BaseModel]
    description: str
    cacheable: bool
    tags: tuple[str, ...]

    @property
    def qualified_name(self) -> str:
        return f"{self.tool.value}.{self.name}"

    @property
    def parameter_schema(self) -> JsonSchema:
        return self.params_model.model_json_schema()

    def parse_params(self, raw: Dict[str, Any]) -> BaseModel:
        """Validate raw params, reporting absent fields as ``MissingParam``."""

        try:
            return self.params_model.model_validate(raw)
        except ValidationError as exc:
            errors = exc.errors()
            missing = [str(err["loc"][0]) for err in errors if err["type"] == "missing" and err["loc"]]
            if missing:
                raise MissingParam(*missing) from exc
            raise InvalidEnvelope(
                f"Invalid params for {self.qualified_name}",
                details={
                    "errors": [
                        {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
                        for err in errors
                    ]
                },
            ) from exc

    async def invoke(self, state: "ApiState", params: BaseModel) -> Any:
        return await self.handler(state, params)

    def describe(self) -> Dict[str, Any]:
        return {
            "tool": self.tool.value,
            "action": self.name,
            "description": self.description,
            "cacheable": self.cacheable,
            "tags": list(self.tags),
            "parameters": self.parameter_schema,
        }


class ToolRegistry:
    """Fixed table of ``(tool, action)`` handlers."""

    def __init__(self) -> None:
        self._actions: Dict[ToolName, Dict[str, ToolAction]] = {tool: {} for tool in ToolName}

    def register(
        self,
        tool: ToolName,
        name: str,
        *,
        params: Type[BaseModel],
        description: str,
        cacheable: bool = False,
        tags: Optional[Iterable[str]] = None,
    ) -> Callable[[Handler], Handler]:
        def decorator(func: Handler) -> Handler:
            if name in self._actions[tool]:
                raise ValueError(f"Action '{tool.value}.{name}' is already registered.")
            self._actions[tool][name] = ToolAction(
                tool=tool,
                name=name,
                handler=func,
                params_model=params,
                description=description,
                cacheable=cacheable,
                tags=tuple(tags or ()),
            )
            return func

        return decorator

    def lookup(self, tool: str, action: str) -> ToolAction:
        try:
            tool_name = ToolName(tool)
        except ValueError as exc:
            raise UnknownRoute(f"Unknown tool: {tool}", details={"tool": tool}) from exc
        found = self._actions[tool_name].get(action)
        if found is None:
            raise UnknownRoute(
                f"Unknown action: {tool}.{action}",
                details={"tool": tool, "action": action},
            )
        return found

    def actions(self) -> List[ToolAction]:
        return [action for tool in ToolName for action in self._actions[tool].values()]


REGISTRY = ToolRegistry()
register_action = REGISTRY.register

"""
Tool dispatch table.

Most tools are one row: request message type, argument -> data builder,
response data -> result mapper. ``register_api_tools`` turns rows into
handlers bound to a VTSClient.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Iterable, List, Optional

from vts_mcp.core.errors import ToolError
from vts_mcp.core.schema import validate_arguments

if TYPE_CHECKING:
    from vts_mcp.vts.client import VTSClient

JSON = Dict[str, Any]
Handler = Callable[[JSON], Awaitable[Any]]


def no_data(_args: JSON) -> Optional[JSON]:
    return None


def passthrough(data: JSON, _args: JSON) -> JSON:
    return data


def empty_schema() -> JSON:
    return {"type": "object", "properties": {}, "additionalProperties": False}


@dataclass
class ToolSpec:
    name: str
    description: str
    input_schema: JSON


@dataclass(frozen=True)
class ApiTool:
    name: str
    description: str
    input_schema: JSON
    request_type: str
    build_data: Callable[[JSON], Optional[JSON]] = no_data
    map_result: Callable[[JSON, JSON], Any] = passthrough
    timeout_s: Optional[float] = None

    @property
    def spec(self) -> ToolSpec:
        return ToolSpec(self.name, self.description, self.input_schema)


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: Dict[str, ToolSpec] = {}
        self._handlers: Dict[str, Handler] = {}

    def register(self, spec: ToolSpec, handler: Handler) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec
        self._handlers[spec.name] = handler

    def names(self) -> List[str]:
        return sorted(self._tools)

    def list_specs(self) -> List[JSON]:
        return [
            {
                "name": t.name,
                "description": t.description,
                "inputSchema": t.input_schema,
            }
            for t in sorted(self._tools.values(), key=lambda x: x.name)
        ]

    async def call(self, name: str, arguments: Optional[JSON]) -> Any:
        if name not in self._handlers:
            raise ToolError(f"Unknown tool: {name}", code="tool_not_found")
        if arguments is not None and not isinstance(arguments, dict):
            raise ToolError("Tool arguments must be an object", code="invalid_params")
        args = validate_arguments(name, self._tools[name].input_schema, arguments or {})
        return await self._handlers[name](args)


def api_handler(tool: ApiTool, client: "VTSClient") -> Handler:
    async def _handle(args: JSON) -> Any:
        data = await client.request(
            tool.request_type,
            tool.build_data(args),
            timeout_s=tool.timeout_s,
            id_hint=tool.name,
        )
        return tool.map_result(data, args)

    return _handle


def register_api_tools(registry: ToolRegistry, client: "VTSClient", tools: Iterable[ApiTool]) -> None:
    for tool in tools:
        registry.register(tool.spec, api_handler(tool, client))

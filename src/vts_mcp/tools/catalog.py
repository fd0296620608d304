from __future__ import annotations

from typing import TYPE_CHECKING, List

from vts_mcp.tools import app, artmesh, items, model, parameters, scene, status
from vts_mcp.tools.registry import ApiTool, ToolRegistry, register_api_tools

if TYPE_CHECKING:
    from vts_mcp.vts.client import VTSClient


def api_tools() -> List[ApiTool]:
    return [
        *model.TOOLS,
        *artmesh.TOOLS,
        *parameters.TOOLS,
        *items.TOOLS,
        *scene.TOOLS,
        *app.TOOLS,
    ]


def build_registry(client: "VTSClient") -> ToolRegistry:
    registry = ToolRegistry()
    register_api_tools(registry, client, api_tools())
    status.register(registry, client)
    return registry

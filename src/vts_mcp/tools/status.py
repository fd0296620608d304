from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

from vts_mcp.tools.registry import ToolRegistry, ToolSpec, empty_schema

if TYPE_CHECKING:
    from vts_mcp.vts.client import VTSClient


def register(registry: ToolRegistry, client: "VTSClient") -> None:
    """
    getConnectionStatus: answered locally, works while disconnected.
    """

    async def _handle(_args: Dict[str, Any]) -> Dict[str, Any]:
        return client.status()

    registry.register(
        ToolSpec(
            name="getConnectionStatus",
            description=(
                "Report the bridge's connection to VTube Studio: endpoint, session state, "
                "authentication and pending requests."
            ),
            input_schema=empty_schema(),
        ),
        _handle,
    )

"""
Application-level tools: statistics, folders, event subscriptions.
"""

from __future__ import annotations

from typing import Any, Dict

from vts_mcp.tools.registry import ApiTool, empty_schema

JSON = Dict[str, Any]

KNOWN_EVENTS = (
    "TestEvent",
    "ModelLoadedEvent",
    "TrackingStatusChangedEvent",
    "BackgroundChangedEvent",
    "ModelConfigChangedEvent",
    "ModelMovedEvent",
    "ModelOutlineEvent",
    "HotkeyTriggeredEvent",
    "ModelAnimationEvent",
    "ItemEvent",
    "ModelClickedEvent",
    "PostProcessingEvent",
    "Live2DCubismEditorConnectedEvent",
)


def _subscription_data(args: JSON) -> JSON:
    return {
        "eventName": args["eventName"],
        "subscribe": args["subscribe"],
        "config": args.get("config") or {},
    }


def _subscription_result(_data: JSON, args: JSON) -> JSON:
    verb = "subscribed to" if args["subscribe"] else "unsubscribed from"
    return {
        "success": True,
        "eventName": args["eventName"],
        "subscribed": args["subscribe"],
        "message": f"Successfully {verb} event: {args['eventName']}.",
    }


TOOLS = [
    ApiTool(
        name="getVTSStatistics",
        description="Retrieves various statistics about the current VTube Studio session",
        input_schema=empty_schema(),
        request_type="StatisticsRequest",
    ),
    ApiTool(
        name="getVTSFolders",
        description="Retrieves the names of various folders in the VTube Studio StreamingAssets directory",
        input_schema=empty_schema(),
        request_type="VTSFolderInfoRequest",
    ),
    ApiTool(
        name="subscribeToEvents",
        description=(
            "Subscribe to or unsubscribe from VTube Studio events. Known events: "
            + ", ".join(KNOWN_EVENTS)
            + ". Event payloads are written to the server log."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "eventName": {"type": "string", "minLength": 1},
                "subscribe": {"type": "boolean", "default": True},
                "config": {"type": "object", "description": "Event-specific configuration."},
            },
            "required": ["eventName"],
        },
        request_type="EventSubscriptionRequest",
        build_data=_subscription_data,
        map_result=_subscription_result,
        timeout_s=10.0,
    ),
]

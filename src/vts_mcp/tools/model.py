"""
Model tools: current/available models, movement, physics, hotkeys, expressions.
"""

from __future__ import annotations

from typing import Any, Dict, List

from vts_mcp.tools.registry import ApiTool, empty_schema

JSON = Dict[str, Any]

_MOVE_OPTIONAL = ("positionX", "positionY", "rotation", "size")


def _move_model_data(args: JSON) -> JSON:
    data = {
        "timeInSeconds": args["timeInSeconds"],
        "valuesAreRelativeToModel": args["valuesAreRelativeToModel"],
    }
    for key in _MOVE_OPTIONAL:
        if key in args:
            data[key] = args[key]
    return data


def _physics_result(data: JSON, _args: JSON) -> JSON:
    keys = (
        "modelLoaded",
        "modelName",
        "modelID",
        "modelHasPhysics",
        "physicsSwitchedOn",
        "usingLegacyPhysics",
        "physicsFPSSetting",
        "baseStrength",
        "baseWind",
        "apiPhysicsOverrideActive",
        "apiPhysicsOverridePluginName",
        "physicsGroups",
    )
    out: JSON = {"success": True}
    out.update({k: data.get(k) for k in keys})
    out["message"] = f"Retrieved physics settings for {data.get('modelName') or 'no model loaded'}."
    return out


def _override_schema(description: str) -> JSON:
    return {
        "type": "array",
        "default": [],
        "description": description,
        "items": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Physics group ID; empty for the base value."},
                "value": {"type": "number", "minimum": 0, "maximum": 2, "default": 1.0},
                "setBaseValue": {"type": "boolean", "default": False},
                "overrideSeconds": {"type": "number", "minimum": 0.5, "maximum": 5, "default": 2},
            },
        },
    }


def _overrides(items: List[JSON]) -> List[JSON]:
    return [
        {
            "id": o.get("id") or "",
            "value": o["value"],
            "setBaseValue": o["setBaseValue"],
            "overrideSeconds": o["overrideSeconds"],
        }
        for o in items
    ]


def _hotkeys_data(args: JSON) -> JSON:
    # VTube Studio ignores the item file name once a model ID is given.
    if args.get("modelID"):
        return {"modelID": args["modelID"]}
    if args.get("live2DItemFileName"):
        return {"live2DItemFileName": args["live2DItemFileName"]}
    return {}


def _expression_data(args: JSON) -> JSON:
    fade = max(0.0, min(2.0, float(args["fadeTime"])))
    return {"expressionFile": args["expressionFile"], "active": args["active"], "fadeTime": fade}


TOOLS = [
    ApiTool(
        name="getCurrentModel",
        description="Get information about the currently loaded model in VTube Studio.",
        input_schema=empty_schema(),
        request_type="CurrentModelRequest",
    ),
    ApiTool(
        name="getAvailableModels",
        description="Retrieves a list of available VTube Studio models",
        input_schema=empty_schema(),
        request_type="AvailableModelsRequest",
    ),
    ApiTool(
        name="moveModel",
        description="Changes the position, rotation, and size of the currently loaded VTube Studio model",
        input_schema={
            "type": "object",
            "properties": {
                "timeInSeconds": {
                    "type": "number",
                    "minimum": 0,
                    "maximum": 2,
                    "description": "Time in seconds for the movement to take (0 for instant).",
                },
                "valuesAreRelativeToModel": {
                    "type": "boolean",
                    "description": "Whether the provided values are relative to the current model position.",
                },
                "positionX": {"type": "number", "minimum": -1000, "maximum": 1000},
                "positionY": {"type": "number", "minimum": -1000, "maximum": 1000},
                "rotation": {"type": "number", "minimum": -360, "maximum": 360, "description": "Degrees"},
                "size": {"type": "number", "minimum": -100, "maximum": 100},
            },
            "required": ["timeInSeconds", "valuesAreRelativeToModel"],
        },
        request_type="MoveModelRequest",
        build_data=_move_model_data,
    ),
    ApiTool(
        name="getCurrentModelPhysics",
        description=(
            "Retrieve the physics settings of the currently loaded model in VTube Studio, "
            "including base strength, wind, and group-specific multipliers."
        ),
        input_schema=empty_schema(),
        request_type="GetCurrentModelPhysicsRequest",
        map_result=_physics_result,
        timeout_s=10.0,
    ),
    ApiTool(
        name="setCurrentModelPhysics",
        description=(
            "Override physics settings of the currently loaded model in VTube Studio, "
            "including strength and wind values for specific groups or base settings."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "strengthOverrides": _override_schema("Physics strength overrides."),
                "windOverrides": _override_schema("Physics wind overrides."),
            },
        },
        request_type="SetCurrentModelPhysicsRequest",
        build_data=lambda args: {
            "strengthOverrides": _overrides(args["strengthOverrides"]),
            "windOverrides": _overrides(args["windOverrides"]),
        },
        map_result=lambda _data, _args: {
            "success": True,
            "message": "Physics settings overridden successfully for the current model.",
        },
        timeout_s=10.0,
    ),
    ApiTool(
        name="getHotkeys",
        description="Get the list of hotkeys available in the current or specified VTS model from VTube Studio.",
        input_schema={
            "type": "object",
            "properties": {
                "modelID": {
                    "type": "string",
                    "description": "Optional ID of the model to get hotkeys for. If not provided, the current model is used.",
                },
                "live2DItemFileName": {
                    "type": "string",
                    "description": "Optional filename of the Live2D item to get hotkeys for. Ignored if modelID is provided.",
                },
            },
        },
        request_type="HotkeysInCurrentModelRequest",
        build_data=_hotkeys_data,
    ),
    ApiTool(
        name="triggerHotkey",
        description="Triggers a hotkey in the current VTube Studio model",
        input_schema={
            "type": "object",
            "properties": {
                "hotkeyID": {"type": "string", "description": "The ID or name of the hotkey to trigger."},
                "itemInstanceID": {
                    "type": "string",
                    "default": "",
                    "description": "Optional: The instance ID of the Live2D item to trigger the hotkey for.",
                },
            },
            "required": ["hotkeyID"],
        },
        request_type="HotkeyTriggerRequest",
        build_data=lambda args: {"hotkeyID": args["hotkeyID"], "itemInstanceID": args["itemInstanceID"]},
    ),
    ApiTool(
        name="getExpressionStates",
        description="Get the current state (active or inactive) of expressions in the current model from VTube Studio.",
        input_schema={
            "type": "object",
            "properties": {
                "details": {
                    "type": "boolean",
                    "default": True,
                    "description": "Whether to include detailed information about expressions.",
                },
                "expressionFile": {
                    "type": "string",
                    "default": "",
                    "description": "Optional specific expression file to query. If empty, all expressions are returned.",
                },
            },
        },
        request_type="ExpressionStateRequest",
        build_data=lambda args: {"details": args["details"], "expressionFile": args["expressionFile"]},
    ),
    ApiTool(
        name="controlExpression",
        description="Activate or deactivate an expression in the current model in VTube Studio.",
        input_schema={
            "type": "object",
            "properties": {
                "expressionFile": {
                    "type": "string",
                    "pattern": r"\.exp3\.json$",
                    "description": "The filename of the expression to control (must end with .exp3.json).",
                },
                "active": {
                    "type": "boolean",
                    "description": "Whether to activate (true) or deactivate (false) the expression.",
                },
                "fadeTime": {
                    "type": "number",
                    "default": 0.25,
                    "description": "The fade time in seconds for the expression change (between 0 and 2).",
                },
            },
            "required": ["expressionFile", "active"],
        },
        request_type="ExpressionActivationRequest",
        build_data=_expression_data,
    ),
]

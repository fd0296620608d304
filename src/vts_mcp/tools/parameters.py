"""
Parameter tools: Live2D/tracking parameter listing, custom parameters, injection.
"""

from __future__ import annotations

from typing import Any, Dict

from vts_mcp.tools.registry import ApiTool, empty_schema

JSON = Dict[str, Any]

_VALUE_RANGE = {"type": "number", "minimum": -1000000, "maximum": 1000000}


def _creation_data(args: JSON) -> JSON:
    data = {
        "parameterName": args["parameterName"],
        "min": args["min"],
        "max": args["max"],
        "defaultValue": args["defaultValue"],
    }
    if args.get("explanation"):
        data["explanation"] = args["explanation"]
    return data


def _injection_data(args: JSON) -> JSON:
    data: JSON = {"mode": args["mode"], "parameterValues": args["parameterValues"]}
    if "faceFound" in args:
        data["faceFound"] = args["faceFound"]
    return data


TOOLS = [
    ApiTool(
        name="getLive2DParameters",
        description="Get the value for all Live2D parameters in the current model from VTube Studio.",
        input_schema=empty_schema(),
        request_type="Live2DParameterListRequest",
        build_data=lambda _args: {},
    ),
    ApiTool(
        name="getTrackingParameters",
        description=(
            "Retrieves a list of available tracking parameters from VTube Studio, "
            "including both default and custom parameters."
        ),
        input_schema=empty_schema(),
        request_type="InputParameterListRequest",
        build_data=lambda _args: {},
    ),
    ApiTool(
        name="addCustomParameter",
        description="Adds a new custom tracking parameter to VTube Studio for use in models",
        input_schema={
            "type": "object",
            "properties": {
                "parameterName": {
                    "type": "string",
                    "minLength": 4,
                    "maxLength": 32,
                    "pattern": "^[a-zA-Z0-9]+$",
                    "description": "Name of the new parameter (alphanumeric, 4-32 characters).",
                },
                "explanation": {
                    "type": "string",
                    "maxLength": 256,
                    "description": "Optional short explanation of the parameter (max 256 characters).",
                },
                "min": {**_VALUE_RANGE, "description": "Minimum value for the parameter."},
                "max": {**_VALUE_RANGE, "description": "Maximum value for the parameter."},
                "defaultValue": {**_VALUE_RANGE, "description": "Default value for the parameter."},
            },
            "required": ["parameterName", "min", "max", "defaultValue"],
        },
        request_type="ParameterCreationRequest",
        build_data=_creation_data,
    ),
    ApiTool(
        name="injectParameterData",
        description="Feeds data into default or custom parameters in VTube Studio for model control",
        input_schema={
            "type": "object",
            "properties": {
                "faceFound": {"type": "boolean", "description": "Whether to consider the face as found."},
                "mode": {
                    "type": "string",
                    "enum": ["set", "add"],
                    "default": "set",
                    "description": 'Mode of operation: "set" to override, "add" to add to current value.',
                },
                "parameterValues": {
                    "type": "array",
                    "description": "Array of parameter values to inject.",
                    "items": {
                        "type": "object",
                        "properties": {
                            "id": {"type": "string", "description": "Parameter ID to set value for."},
                            "value": {**_VALUE_RANGE, "description": "Value to set for the parameter."},
                            "weight": {
                                "type": "number",
                                "minimum": 0,
                                "maximum": 1,
                                "description": "Weight for mixing with face tracking value (default 1).",
                            },
                        },
                        "required": ["id", "value"],
                    },
                },
            },
            "required": ["parameterValues"],
        },
        request_type="InjectParameterDataRequest",
        build_data=_injection_data,
    ),
]

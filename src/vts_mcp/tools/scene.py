"""
Scene tools: color overlay, post-processing, NDI output.
"""

from __future__ import annotations

from typing import Any, Dict

from vts_mcp.tools.registry import ApiTool, empty_schema

JSON = Dict[str, Any]


def _rgb(data: JSON, prefix: str) -> JSON:
    return {
        "r": data.get(f"{prefix}R"),
        "g": data.get(f"{prefix}G"),
        "b": data.get(f"{prefix}B"),
    }


def _capture_part(part: Any) -> JSON:
    part = part or {}
    return {"active": part.get("active"), "color": _rgb(part, "color")}


def _overlay_result(data: JSON, _args: JSON) -> JSON:
    return {
        "success": True,
        "active": data.get("active"),
        "itemsIncluded": data.get("itemsIncluded"),
        "isWindowCapture": data.get("isWindowCapture"),
        "baseBrightness": data.get("baseBrightness"),
        "colorBoost": data.get("colorBoost"),
        "smoothing": data.get("smoothing"),
        "colorOverlay": _rgb(data, "colorOverlay"),
        "colorAverage": _rgb(data, "colorAvg"),
        "leftCapturePart": _capture_part(data.get("leftCapturePart")),
        "middleCapturePart": _capture_part(data.get("middleCapturePart")),
        "rightCapturePart": _capture_part(data.get("rightCapturePart")),
        "message": "Scene color overlay information retrieved successfully.",
    }


# -------------------------
# Post-processing
# -------------------------

_POST_KEYS = (
    "postProcessingOn",
    "setPostProcessingPreset",
    "setPostProcessingValues",
    "postProcessingFadeTime",
    "setAllOtherValuesToDefault",
    "usingRestrictedEffects",
    "randomizeAll",
    "randomizeAllChaosLevel",
    "postProcessingValues",
)


def _post_data(args: JSON) -> JSON:
    data = {k: args[k] for k in _POST_KEYS}
    data["presetToSet"] = args.get("presetToSet", "")
    return data


def _post_result(data: JSON, _args: JSON) -> JSON:
    return {
        "success": True,
        "postProcessingActive": data.get("postProcessingActive"),
        "presetIsActive": data.get("presetIsActive"),
        "activePreset": data.get("activePreset"),
        "activeEffectCount": data.get("activeEffectCount"),
        "message": "Post-processing effects updated successfully.",
    }


# -------------------------
# NDI
# -------------------------

_NDI_KEYS = ("setNewConfig", "ndiActive", "useNDI5", "useCustomResolution", "customWidthNDI", "customHeightNDI")


def _ndi_dimension(description: str) -> JSON:
    # -1 keeps the current resolution
    return {
        "type": "integer",
        "default": -1,
        "anyOf": [{"const": -1}, {"minimum": 256, "maximum": 8192}],
        "description": description,
    }


def _ndi_result(data: JSON, args: JSON) -> JSON:
    return {
        "success": True,
        "ndiSettings": {k: data.get(k) for k in _NDI_KEYS[1:]},
        "message": "NDI settings updated successfully."
        if args.get("setNewConfig")
        else "Current NDI settings retrieved successfully.",
    }


TOOLS = [
    ApiTool(
        name="getSceneColorOverlayInfo",
        description="Get the current scene lighting overlay color information from VTube Studio.",
        input_schema=empty_schema(),
        request_type="SceneColorOverlayInfoRequest",
        build_data=lambda _args: {},
        map_result=_overlay_result,
        timeout_s=10.0,
    ),
    ApiTool(
        name="getPostProcessingList",
        description="Retrieves a list of available post-processing effects and their current state from VTube Studio",
        input_schema={
            "type": "object",
            "properties": {
                "fillPostProcessingPresetsArray": {"type": "boolean", "default": False},
                "fillPostProcessingEffectsArray": {"type": "boolean", "default": False},
                "effectIDFilter": {"type": "array", "items": {"type": "string"}, "default": []},
            },
        },
        request_type="PostProcessingListRequest",
        build_data=lambda args: dict(args),
        timeout_s=10.0,
    ),
    ApiTool(
        name="setPostProcessingEffects",
        description="Set post-processing effects in VTube Studio, either by applying a preset or setting individual values.",
        input_schema={
            "type": "object",
            "properties": {
                "postProcessingOn": {"type": "boolean", "default": True},
                "setPostProcessingPreset": {"type": "boolean", "default": False},
                "setPostProcessingValues": {"type": "boolean", "default": False},
                "presetToSet": {"type": "string", "description": "Preset name, used with setPostProcessingPreset."},
                "postProcessingFadeTime": {"type": "number", "minimum": 0, "maximum": 2, "default": 0},
                "setAllOtherValuesToDefault": {"type": "boolean", "default": False},
                "usingRestrictedEffects": {"type": "boolean", "default": False},
                "randomizeAll": {"type": "boolean", "default": False},
                "randomizeAllChaosLevel": {"type": "number", "minimum": 0, "maximum": 1, "default": 0.4},
                "postProcessingValues": {
                    "type": "array",
                    "default": [],
                    "items": {
                        "type": "object",
                        "properties": {
                            "configID": {"type": "string", "minLength": 1},
                            "configValue": {"type": "string", "minLength": 1},
                        },
                        "required": ["configID", "configValue"],
                    },
                },
            },
        },
        request_type="PostProcessingUpdateRequest",
        build_data=_post_data,
        map_result=_post_result,
        timeout_s=10.0,
    ),
    ApiTool(
        name="ndiConfig",
        description="Get or set NDI (Network Device Interface) configuration settings in VTube Studio.",
        input_schema={
            "type": "object",
            "properties": {
                "setNewConfig": {
                    "type": "boolean",
                    "default": False,
                    "description": "false only reads the current settings.",
                },
                "ndiActive": {"type": "boolean", "default": False},
                "useNDI5": {"type": "boolean", "default": True},
                "useCustomResolution": {"type": "boolean", "default": False},
                "customWidthNDI": _ndi_dimension("Width in pixels, a multiple of 16 between 256 and 8192."),
                "customHeightNDI": _ndi_dimension("Height in pixels, a multiple of 8 between 256 and 8192."),
            },
        },
        request_type="NDIConfigRequest",
        build_data=lambda args: {k: args[k] for k in _NDI_KEYS},
        map_result=_ndi_result,
        timeout_s=10.0,
    ),
]

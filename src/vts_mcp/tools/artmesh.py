"""
ArtMesh tools: listing, user selection, color tinting.
"""

from __future__ import annotations

from typing import Any, Dict

from vts_mcp.tools.registry import ApiTool, empty_schema

JSON = Dict[str, Any]


def _selection_result(data: JSON, _args: JSON) -> JSON:
    active = data.get("activeArtMeshes") or []
    success = bool(data.get("success"))
    return {
        "success": success,
        "activeArtMeshes": active,
        "inactiveArtMeshes": data.get("inactiveArtMeshes") or [],
        "message": f"User selected {len(active)} ArtMeshes."
        if success
        else "User cancelled the ArtMesh selection.",
    }


def _channel(description: str) -> JSON:
    return {"type": "number", "minimum": 0, "maximum": 255, "default": 255, "description": description}


def _string_list(description: str) -> JSON:
    return {"type": "array", "items": {"type": "string"}, "default": [], "description": description}


_COLOR_KEYS = ("colorR", "colorG", "colorB", "colorA", "mixWithSceneLightingColor")
_MATCHER_KEYS = ("tintAll", "artMeshNumber", "nameExact", "nameContains", "tagExact", "tagContains")


TOOLS = [
    ApiTool(
        name="getArtMeshList",
        description="Get the list of ArtMeshes in the current model from VTube Studio.",
        input_schema=empty_schema(),
        request_type="ArtMeshListRequest",
    ),
    ApiTool(
        name="selectArtMeshes",
        description="Request user selection of ArtMeshes in VTube Studio for the currently loaded model.",
        input_schema={
            "type": "object",
            "properties": {
                "textOverride": {"type": "string", "minLength": 4, "maxLength": 1024},
                "helpOverride": {"type": "string", "minLength": 4, "maxLength": 1024},
                "requestedArtMeshCount": {"type": "number", "default": 0},
                "activeArtMeshes": _string_list("ArtMeshes preselected when the dialog opens."),
            },
        },
        request_type="ArtMeshSelectionRequest",
        build_data=lambda args: {
            "textOverride": args.get("textOverride", ""),
            "helpOverride": args.get("helpOverride", ""),
            "requestedArtMeshCount": args["requestedArtMeshCount"],
            "activeArtMeshes": args["activeArtMeshes"],
        },
        map_result=_selection_result,
        # A human picks the meshes in the VTube Studio window.
        timeout_s=30.0,
    ),
    ApiTool(
        name="tintArtMeshes",
        description="Tint ArtMeshes in VTube Studio with a specified color based on matching criteria.",
        input_schema={
            "type": "object",
            "properties": {
                "colorTint": {
                    "type": "object",
                    "properties": {
                        "colorR": _channel("Red"),
                        "colorG": _channel("Green"),
                        "colorB": _channel("Blue"),
                        "colorA": _channel("Alpha"),
                        "mixWithSceneLightingColor": {"type": "number", "minimum": 0, "maximum": 1, "default": 1},
                    },
                },
                "artMeshMatcher": {
                    "type": "object",
                    "properties": {
                        "tintAll": {"type": "boolean", "default": False},
                        "artMeshNumber": {"type": "array", "items": {"type": "number"}, "default": []},
                        "nameExact": _string_list("Exact ArtMesh names."),
                        "nameContains": _string_list("Substrings of ArtMesh names."),
                        "tagExact": _string_list("Exact ArtMesh tags."),
                        "tagContains": _string_list("Substrings of ArtMesh tags."),
                    },
                },
            },
            "required": ["colorTint", "artMeshMatcher"],
        },
        request_type="ColorTintRequest",
        build_data=lambda args: {
            "colorTint": {k: args["colorTint"][k] for k in _COLOR_KEYS},
            "artMeshMatcher": {k: args["artMeshMatcher"][k] for k in _MATCHER_KEYS},
        },
        map_result=lambda data, _args: {
            "success": True,
            "matchedArtMeshes": data.get("matchedArtMeshes"),
            "message": f"Successfully tinted {data.get('matchedArtMeshes')} ArtMeshes with the specified color.",
        },
        timeout_s=10.0,
    ),
]

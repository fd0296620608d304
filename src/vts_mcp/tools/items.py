"""
Item tools: list, load, move, unload, pin and animate items in the scene.
"""

from __future__ import annotations

from typing import Any, Dict

from vts_mcp.tools.registry import ApiTool

JSON = Dict[str, Any]

FADE_MODES = ["linear", "easeIn", "easeOut", "easeBoth", "overshoot", "zip"]
ANGLE_RELATIVE_TO = [
    "RelativeToWorld",
    "RelativeToCurrentItemRotation",
    "RelativeToModel",
    "RelativeToPinPosition",
]
SIZE_RELATIVE_TO = ["RelativeToWorld", "RelativeToCurrentItemSize"]
VERTEX_PIN_TYPES = ["Provided", "Center", "Random"]

MAX_ITEMS_PER_MOVE = 64


def _num(default: float, lo: float, hi: float, description: str = "") -> JSON:
    out: JSON = {"type": "number", "minimum": lo, "maximum": hi, "default": default}
    if description:
        out["description"] = description
    return out


def _flag(default: bool, description: str = "") -> JSON:
    out: JSON = {"type": "boolean", "default": default}
    if description:
        out["description"] = description
    return out


# -------------------------
# loadItemIntoScene
# -------------------------

_LOAD_KEYS = (
    "fileName",
    "positionX",
    "positionY",
    "size",
    "rotation",
    "fadeTime",
    "order",
    "failIfOrderTaken",
    "smoothing",
    "censored",
    "flipped",
    "locked",
    "unloadWhenPluginDisconnects",
    "customDataAskUserFirst",
    "customDataSkipAskingUserIfWhitelisted",
    "customDataAskTimer",
)


def _load_data(args: JSON) -> JSON:
    data = {k: args[k] for k in _LOAD_KEYS}
    data["customDataBase64"] = args.get("customDataBase64", "")
    return data


def _load_result(data: JSON, _args: JSON) -> JSON:
    return {
        "success": True,
        "instanceID": data.get("instanceID"),
        "fileName": data.get("fileName"),
        "message": f"Item {data.get('fileName')} loaded successfully with instance ID {data.get('instanceID')}.",
    }


LOAD_ITEM_SCHEMA: JSON = {
    "type": "object",
    "properties": {
        "fileName": {
            "type": "string",
            "minLength": 8,
            "maxLength": 32,
            "pattern": r"^[a-zA-Z0-9-]+\.(jpg|png|gif)$",
            "description": "Item file name in the VTube Studio items folder (jpg, png or gif).",
        },
        "positionX": _num(0, -1000, 1000),
        "positionY": _num(0.5, -1000, 1000),
        "size": _num(0.33, 0, 1),
        "rotation": _num(90, -360, 360),
        "fadeTime": _num(0.5, 0, 2, "Fade-in time in seconds."),
        "order": {"type": "integer", "default": 4, "description": "Layer order; may shift if taken."},
        "failIfOrderTaken": _flag(False),
        "smoothing": _num(0, 0, 1),
        "censored": _flag(False),
        "flipped": _flag(False),
        "locked": _flag(False),
        "unloadWhenPluginDisconnects": _flag(True),
        "customDataBase64": {
            "type": "string",
            "description": "Optional base64 image data for a custom item instead of a file.",
        },
        "customDataAskUserFirst": _flag(True),
        "customDataSkipAskingUserIfWhitelisted": _flag(True),
        "customDataAskTimer": {"type": "number", "default": -1},
    },
    "required": ["fileName"],
}


# -------------------------
# moveItemInScene
# -------------------------

MOVE_ITEM_SCHEMA: JSON = {
    "type": "object",
    "properties": {
        "itemsToMove": {
            "type": "array",
            "maxItems": MAX_ITEMS_PER_MOVE,
            "items": {
                "type": "object",
                "properties": {
                    "itemInstanceID": {"type": "string"},
                    "timeInSeconds": _num(1, 0, 30),
                    "fadeMode": {"type": "string", "enum": FADE_MODES, "default": "easeOut"},
                    "positionX": {"type": "number", "default": 0.2},
                    "positionY": {"type": "number", "default": -0.8},
                    "size": {"type": "number", "default": 0.6},
                    "rotation": {"type": "number", "default": 180},
                    "order": {"type": "integer", "default": -1000},
                    "setFlip": _flag(True),
                    "flip": _flag(False),
                    "userCanStop": _flag(True),
                },
                "required": ["itemInstanceID"],
            },
        },
    },
    "required": ["itemsToMove"],
}


def _move_result(data: JSON, _args: JSON) -> JSON:
    moved = data.get("movedItems") or []
    return {
        "success": True,
        "movedItems": moved,
        "message": f"Successfully processed move request for {len(moved)} item(s).",
    }


# -------------------------
# removeItemFromScene
# -------------------------

_REMOVE_KEYS = (
    "unloadAllInScene",
    "unloadAllLoadedByThisPlugin",
    "allowUnloadingItemsLoadedByUserOrOtherPlugins",
    "instanceIDs",
    "fileNames",
)


def _remove_result(data: JSON, _args: JSON) -> JSON:
    unloaded = data.get("unloadedItems") or []
    return {
        "success": True,
        "unloadedItems": unloaded,
        "message": f"Successfully removed {len(unloaded)} items from the scene.",
    }


# -------------------------
# pinItemToModel
# -------------------------

PIN_INFO_SCHEMA: JSON = {
    "type": "object",
    "properties": {
        "modelID": {"type": "string"},
        "artMeshID": {"type": "string"},
        "angle": {"type": "number", "default": 0},
        "size": {"type": "number", "default": 0.33},
        "vertexID1": {"type": "integer"},
        "vertexID2": {"type": "integer"},
        "vertexID3": {"type": "integer"},
        "vertexWeight1": {"type": "number"},
        "vertexWeight2": {"type": "number"},
        "vertexWeight3": {"type": "number"},
    },
}


def _pin_data(args: JSON) -> JSON:
    return {
        "pin": args["pin"],
        "itemInstanceID": args["itemInstanceID"],
        "angleRelativeTo": args["angleRelativeTo"],
        "sizeRelativeTo": args["sizeRelativeTo"],
        "vertexPinType": args["vertexPinType"],
        "pinInfo": (args.get("pinInfo") or {}) if args["pin"] else {},
    }


def _pin_result(data: JSON, _args: JSON) -> JSON:
    pinned = bool(data.get("isPinned"))
    return {
        "success": True,
        "isPinned": pinned,
        "itemInstanceID": data.get("itemInstanceID"),
        "itemFileName": data.get("itemFileName"),
        "message": (
            f"Item {data.get('itemFileName')} with instance ID {data.get('itemInstanceID')} "
            f"is {'pinned' if pinned else 'unpinned'}."
        ),
    }


# -------------------------
# controlItemAnimation
# -------------------------

_ANIMATION_KEYS = (
    "itemInstanceID",
    "framerate",
    "frame",
    "brightness",
    "opacity",
    "setAutoStopFrames",
    "autoStopFrames",
    "setAnimationPlayState",
    "animationPlayState",
)


TOOLS = [
    ApiTool(
        name="getItemList",
        description="Retrieves a list of items in the scene and available items from VTube Studio",
        input_schema={
            "type": "object",
            "properties": {
                "includeAvailableSpots": _flag(False, "Include the list of free item order spots."),
                "includeItemInstancesInScene": _flag(False, "Include items currently loaded in the scene."),
                "includeAvailableItemFiles": _flag(False, "Include item files that can be loaded."),
                "onlyItemsWithFileName": {"type": "string", "default": ""},
                "onlyItemsWithInstanceID": {"type": "string", "default": ""},
            },
        },
        request_type="ItemListRequest",
        build_data=lambda args: dict(args),
        timeout_s=10.0,
    ),
    ApiTool(
        name="loadItemIntoScene",
        description="Load an item into the VTube Studio scene with specified properties.",
        input_schema=LOAD_ITEM_SCHEMA,
        request_type="ItemLoadRequest",
        build_data=_load_data,
        map_result=_load_result,
        timeout_s=10.0,
    ),
    ApiTool(
        name="moveItemInScene",
        description="Move one or more items in the VTube Studio scene with specified properties.",
        input_schema=MOVE_ITEM_SCHEMA,
        request_type="ItemMoveRequest",
        build_data=lambda args: {"itemsToMove": args["itemsToMove"]},
        map_result=_move_result,
        timeout_s=10.0,
    ),
    ApiTool(
        name="removeItemFromScene",
        description="Remove items from the VTube Studio scene based on specified criteria.",
        input_schema={
            "type": "object",
            "properties": {
                "unloadAllInScene": _flag(False),
                "unloadAllLoadedByThisPlugin": _flag(False),
                "allowUnloadingItemsLoadedByUserOrOtherPlugins": _flag(True),
                "instanceIDs": {"type": "array", "items": {"type": "string"}, "default": []},
                "fileNames": {"type": "array", "items": {"type": "string"}, "default": []},
            },
        },
        request_type="ItemUnloadRequest",
        build_data=lambda args: {k: args[k] for k in _REMOVE_KEYS},
        map_result=_remove_result,
        timeout_s=10.0,
    ),
    ApiTool(
        name="pinItemToModel",
        description="Pin or unpin an item to a model in VTube Studio.",
        input_schema={
            "type": "object",
            "properties": {
                "pin": _flag(True, "true to pin, false to unpin."),
                "itemInstanceID": {"type": "string"},
                "angleRelativeTo": {"type": "string", "enum": ANGLE_RELATIVE_TO, "default": "RelativeToModel"},
                "sizeRelativeTo": {"type": "string", "enum": SIZE_RELATIVE_TO, "default": "RelativeToWorld"},
                "vertexPinType": {"type": "string", "enum": VERTEX_PIN_TYPES, "default": "Provided"},
                "pinInfo": PIN_INFO_SCHEMA,
            },
            "required": ["itemInstanceID"],
        },
        request_type="ItemPinRequest",
        build_data=_pin_data,
        map_result=_pin_result,
        timeout_s=10.0,
    ),
    ApiTool(
        name="controlItemAnimation",
        description="Controls animation and appearance properties of items in VTube Studio",
        input_schema={
            "type": "object",
            "properties": {
                "itemInstanceID": {"type": "string"},
                "framerate": {"type": "number", "default": -1, "description": "-1 leaves it unchanged."},
                "frame": {"type": "number", "default": -1, "description": "-1 leaves it unchanged."},
                "brightness": {"type": "number", "default": -1},
                "opacity": {"type": "number", "default": -1},
                "setAutoStopFrames": _flag(False),
                "autoStopFrames": {"type": "array", "items": {"type": "number"}, "default": []},
                "setAnimationPlayState": _flag(False),
                "animationPlayState": _flag(False),
            },
            "required": ["itemInstanceID"],
        },
        request_type="ItemAnimationControlRequest",
        build_data=lambda args: {k: args[k] for k in _ANIMATION_KEYS},
    ),
]

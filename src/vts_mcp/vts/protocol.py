"""
VTube Studio public API message helpers.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

API_NAME = "VTubeStudioPublicAPI"
API_VERSION = "1.0"
API_ERROR = "APIError"

AUTH_TOKEN_REQUEST = "AuthenticationTokenRequest"
AUTH_TOKEN_RESPONSE = "AuthenticationTokenResponse"
AUTH_REQUEST = "AuthenticationRequest"
AUTH_RESPONSE = "AuthenticationResponse"


def make_request(message_type: str, request_id: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    message: Dict[str, Any] = {
        "apiName": API_NAME,
        "apiVersion": API_VERSION,
        "requestID": request_id,
        "messageType": message_type,
    }
    if data is not None:
        message["data"] = data
    return message


def response_type_for(request_type: str) -> str:
    """``FooRequest`` -> ``FooResponse``."""
    if request_type.endswith("Request"):
        return request_type[: -len("Request")] + "Response"
    return request_type + "Response"


def is_api_error(message: Dict[str, Any]) -> bool:
    return message.get("messageType") == API_ERROR


def error_details(message: Dict[str, Any]) -> Dict[str, Any]:
    data = message.get("data") or {}
    return {
        "errorID": data.get("errorID", -1),
        "message": data.get("message") or "Unknown API error",
    }

"""
Error taxonomy shared by the bridge core and the tool layer.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

JSON = Dict[str, Any]


class BridgeError(RuntimeError):
    code = "internal_error"
    recoverable = False

    def __init__(self, message: str, *, code: Optional[str] = None, data: Optional[JSON] = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.message = message
        self.data = data or {}


class ConfigError(BridgeError):
    code = "config_error"


# -------------------------
# Transport / handshake
# -------------------------

class TransportError(BridgeError):
    code = "transport_error"
    recoverable = True


class ConnectionClosed(TransportError):
    code = "connection_closed"


class HandshakeTimeout(TransportError):
    code = "handshake_timeout"


class AuthenticationRejected(BridgeError):
    code = "authentication_rejected"
    recoverable = True

    def __init__(self, reason: str = "") -> None:
        super().__init__(
            f"VTube Studio rejected the authentication token: {reason or 'no reason given'}",
            data={"reason": reason},
        )
        self.reason = reason


# -------------------------
# Per-call failures
# -------------------------

class APIError(BridgeError):
    code = "api_error"

    def __init__(self, error_id: Any, message: str, request_id: Optional[str] = None) -> None:
        super().__init__(
            f"API Error {error_id}: {message}",
            data={"errorID": error_id, "message": message, "requestID": request_id},
        )
        self.error_id = error_id
        self.api_message = message
        self.request_id = request_id


class RequestTimeout(BridgeError):
    code = "request_timeout"
    recoverable = True

    def __init__(self, request_id: str, expected_type: str, timeout_s: float) -> None:
        super().__init__(
            f"Timed out after {timeout_s:g}s waiting for {expected_type} ({request_id})",
            data={"requestID": request_id, "expected": expected_type, "timeout_s": timeout_s},
        )
        self.request_id = request_id
        self.timeout_s = timeout_s


class NotConnected(BridgeError):
    code = "not_connected"
    recoverable = True

    def __init__(self, state: str, retry_after_s: Optional[float] = None) -> None:
        super().__init__(
            f"VTube Studio session is not ready (state: {state})",
            data={"state": state},
        )
        self.state = state
        self.retry_after_s = retry_after_s


class DuplicateRequestError(BridgeError):
    code = "duplicate_request"

    def __init__(self, request_id: str) -> None:
        super().__init__(f"Request id already in flight: {request_id}", data={"requestID": request_id})
        self.request_id = request_id


class ToolError(BridgeError):
    """Raised by the tool registry (unknown tool, invalid arguments)."""

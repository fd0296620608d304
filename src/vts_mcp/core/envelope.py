"""
Envelope builders for VTS MCP tool results.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

from .errors import BridgeError, NotConnected


def _now_ms() -> int:
    return int(time.perf_counter() * 1000)


def build_error(
    code: str,
    message: str,
    recoverable: bool = True,
    retry_after_ms: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    error: Dict[str, Any] = {
        "code": code,
        "message": message,
        "recoverable": recoverable,
    }
    if retry_after_ms is not None:
        error["retry_after_ms"] = retry_after_ms
    if details:
        error["details"] = details
    return error


def error_from_exception(exc: BaseException) -> Dict[str, Any]:
    if isinstance(exc, BridgeError):
        retry_after_ms = None
        if isinstance(exc, NotConnected) and exc.retry_after_s is not None:
            retry_after_ms = int(exc.retry_after_s * 1000)
        return build_error(
            exc.code,
            exc.message,
            recoverable=exc.recoverable,
            retry_after_ms=retry_after_ms,
            details={k: v for k, v in exc.data.items() if v is not None},
        )
    return build_error(
        "internal_error",
        str(exc) or type(exc).__name__,
        recoverable=False,
        details={"type": type(exc).__name__},
    )


def build_envelope(
    *,
    operation: str,
    status: str = "success",
    data: Optional[Any] = None,
    metrics: Optional[Dict[str, Any]] = None,
    error: Optional[Dict[str, Any]] = None,
    started_ms: Optional[int] = None,
) -> Dict[str, Any]:
    envelope: Dict[str, Any] = {
        "status": status,
        "operation": operation,
    }
    if data is not None:
        envelope["data"] = data

    if started_ms is not None:
        duration_ms = max(0, _now_ms() - started_ms)
        metrics = {"duration_ms": duration_ms, **(metrics or {})}
    if metrics:
        envelope["metrics"] = metrics

    if error:
        envelope["error"] = error
    return envelope

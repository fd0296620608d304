"""
Safe execution wrapper that guarantees structured envelopes.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict

from . import envelope
from .errors import BridgeError

_log = logging.getLogger("vts_mcp.tools")


async def safe_execute(operation: str, func: Callable[[], Awaitable[Any]]) -> Dict[str, Any]:
    """
    Await a tool coroutine, wrapping its result or failure into an envelope.
    """
    started = int(time.perf_counter() * 1000)
    try:
        result = await func()
    except BridgeError as exc:
        _log.warning("%s failed: %s", operation, exc.message)
        return envelope.build_envelope(
            operation=operation,
            status="error",
            error=envelope.error_from_exception(exc),
            started_ms=started,
        )
    except Exception as exc:
        _log.exception("%s crashed", operation)
        return envelope.build_envelope(
            operation=operation,
            status="error",
            error=envelope.error_from_exception(exc),
            started_ms=started,
        )
    return envelope.build_envelope(
        operation=operation,
        status="success",
        data=result,
        started_ms=started,
    )

"""
Request/response correlation over one VTube Studio session.

Every request carries a requestID; responses are matched on that id alone,
never on arrival order. A pending entry is removed exactly once, by the
first of: matching response, matching APIError, timeout, session close.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from vts_mcp.core.errors import APIError, DuplicateRequestError, RequestTimeout
from vts_mcp.vts import protocol

if TYPE_CHECKING:
    from vts_mcp.vts.session import Session

_log = logging.getLogger("vts_mcp.correlator")

JSON = Dict[str, Any]

_DEFAULT = object()


@dataclass
class PendingRequest:
    request_id: str
    expected_type: str
    future: "asyncio.Future[JSON]"
    generation: int


class Correlator:
    def __init__(self, default_timeout_s: float = 5.0) -> None:
        self.default_timeout_s = default_timeout_s
        self._pending: Dict[str, PendingRequest] = {}
        self._counter = itertools.count(1)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def next_request_id(self, hint: str = "request") -> str:
        return f"{hint}-{next(self._counter)}"

    async def issue(
        self,
        session: "Session",
        message: JSON,
        expected_type: str,
        timeout_s: Any = _DEFAULT,
    ) -> JSON:
        """
        Send ``message`` and wait for the response whose requestID matches.

        ``timeout_s=None`` waits without a per-call bound (the caller
        supplies its own). Returns the response ``data``.
        """
        request_id = message.get("requestID")
        if not isinstance(request_id, str) or not request_id:
            raise ValueError("message needs a non-empty requestID")
        if request_id in self._pending:
            raise DuplicateRequestError(request_id)
        if timeout_s is _DEFAULT:
            timeout_s = self.default_timeout_s

        fut: "asyncio.Future[JSON]" = asyncio.get_running_loop().create_future()
        pending = PendingRequest(request_id, expected_type, fut, session.generation)
        # Armed before the send so a fast reply cannot slip past.
        self._pending[request_id] = pending
        try:
            await session.send(message)
            if timeout_s is None:
                return await fut
            try:
                return await asyncio.wait_for(fut, timeout_s)
            except asyncio.TimeoutError:
                _log.warning("No %s for %s within %ss", expected_type, request_id, timeout_s)
                raise RequestTimeout(request_id, expected_type, timeout_s) from None
        finally:
            self._discard(pending)
            if fut.done() and not fut.cancelled():
                # Failed while the send was still in progress; mark it retrieved.
                fut.exception()

    def dispatch(self, message: JSON) -> bool:
        """
        Route an incoming message to its pending request. Returns True if it resolved one.
        """
        request_id = message.get("requestID")
        pending = self._pending.get(request_id) if isinstance(request_id, str) else None
        if pending is None or pending.future.done():
            _log.debug("Unmatched message %s (%s)", message.get("messageType"), request_id)
            return False

        message_type = message.get("messageType")
        if protocol.is_api_error(message):
            details = protocol.error_details(message)
            pending.future.set_exception(APIError(details["errorID"], details["message"], request_id))
        elif message_type == pending.expected_type:
            data = message.get("data")
            pending.future.set_result(data if isinstance(data, dict) else {})
        else:
            _log.warning(
                "Ignoring %s for %s (waiting for %s)", message_type, request_id, pending.expected_type
            )
            return False
        self._discard(pending)
        return True

    def fail_all(self, exc: BaseException) -> int:
        """Fail every in-flight request with ``exc``; returns how many were failed."""
        pending = list(self._pending.values())
        self._pending.clear()
        for p in pending:
            if not p.future.done():
                p.future.set_exception(exc)
        if pending:
            _log.info("Failed %d pending request(s): %s", len(pending), exc)
        return len(pending)

    def _discard(self, pending: PendingRequest) -> None:
        if self._pending.get(pending.request_id) is pending:
            del self._pending[pending.request_id]

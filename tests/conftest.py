"""Shared fakes for the VTube Studio bridge tests."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import pytest

from vts_mcp.vts import protocol
from vts_mcp.vts.correlator import Correlator

JSON = Dict[str, Any]


def reply_to(message: JSON, message_type: str, data: Optional[JSON] = None) -> JSON:
    """Build a VTube Studio response echoing the request's requestID."""
    return {
        "apiName": protocol.API_NAME,
        "apiVersion": protocol.API_VERSION,
        "requestID": message["requestID"],
        "messageType": message_type,
        "data": data or {},
    }


def api_error(message: JSON, error_id: int, text: str) -> JSON:
    return reply_to(message, protocol.API_ERROR, {"errorID": error_id, "message": text})


class FakeSession:
    """
    Stands in for a Session: records sent messages and, when a responder is
    given, feeds its reply back through the correlator on the next loop turn.
    """

    def __init__(
        self,
        correlator: Correlator,
        responder: Optional[Callable[[JSON], Optional[JSON]]] = None,
        generation: int = 1,
        send_error: Optional[BaseException] = None,
    ) -> None:
        self.correlator = correlator
        self.responder = responder
        self.generation = generation
        self.send_error = send_error
        self.authenticated = False
        self.sent: List[JSON] = []

    @property
    def sent_types(self) -> List[str]:
        return [m["messageType"] for m in self.sent]

    async def send(self, message: JSON) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(message)
        if self.responder is None:
            return
        reply = self.responder(message)
        if reply is not None:
            asyncio.get_running_loop().call_soon(self.correlator.dispatch, reply)


class FakeClient:
    """Records VTSClient.request calls and answers from a canned table."""

    def __init__(self, responses: Optional[Dict[str, JSON]] = None, error: Optional[BaseException] = None) -> None:
        self.responses = responses or {}
        self.error = error
        self.calls: List[JSON] = []

    async def request(
        self,
        message_type: str,
        data: Optional[JSON] = None,
        *,
        response_type: Optional[str] = None,
        timeout_s: Optional[float] = None,
        id_hint: Optional[str] = None,
    ) -> JSON:
        self.calls.append(
            {"type": message_type, "data": data, "timeout_s": timeout_s, "id_hint": id_hint}
        )
        if self.error is not None:
            raise self.error
        return self.responses.get(message_type, {})

    def status(self) -> JSON:
        return {"endpoint": "ws://127.0.0.1:8001", "state": "disconnected", "pendingRequests": 0}


@pytest.fixture
def correlator() -> Correlator:
    return Correlator(default_timeout_s=1.0)


@pytest.fixture
def token_path(tmp_path):
    return tmp_path / "auth_token.json"

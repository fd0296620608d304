import asyncio
import json

import pytest
import websockets

from vts_mcp.config import Settings
from vts_mcp.core.errors import APIError, ConnectionClosed, NotConnected
from vts_mcp.vts import protocol
from vts_mcp.vts.client import VTSClient


class FakeVTubeStudio:
    """In-process VTube Studio API: token issue, auth, and a few requests."""

    def __init__(self):
        self.token_requests = 0
        self.auth_tokens = []
        self.connections = 0

    def _reply(self, message, message_type, data):
        return json.dumps(
            {
                "apiName": protocol.API_NAME,
                "apiVersion": protocol.API_VERSION,
                "timestamp": 0,
                "requestID": message["requestID"],
                "messageType": message_type,
                "data": data,
            }
        )

    async def handler(self, ws):
        self.connections += 1
        async for raw in ws:
            message = json.loads(raw)
            mt = message["messageType"]
            if mt == protocol.AUTH_TOKEN_REQUEST:
                self.token_requests += 1
                await ws.send(self._reply(message, protocol.AUTH_TOKEN_RESPONSE, {"authenticationToken": "tok-1"}))
            elif mt == protocol.AUTH_REQUEST:
                self.auth_tokens.append(message["data"]["authenticationToken"])
                await ws.send(self._reply(message, protocol.AUTH_RESPONSE, {"authenticated": True, "reason": ""}))
            elif mt == "CurrentModelRequest":
                await ws.send(self._reply(message, "CurrentModelResponse", {"modelLoaded": True, "modelName": "Akari"}))
            elif mt == "MoveModelRequest":
                await ws.send(
                    self._reply(message, protocol.API_ERROR, {"errorID": 50, "message": "No model loaded"})
                )
            elif mt == "StatisticsRequest":
                # Drop the connection with the request unanswered.
                await ws.close()
                return


@pytest.fixture
async def vts():
    fake = FakeVTubeStudio()
    async with websockets.serve(fake.handler, "127.0.0.1", 0) as server:
        fake.port = server.sockets[0].getsockname()[1]
        yield fake


def _settings(port, token_path, **kw):
    return Settings(
        host="127.0.0.1",
        port=port,
        token_path=token_path,
        reconnect_delay_s=0.05,
        request_timeout_s=5.0,
        **kw,
    )


@pytest.mark.asyncio
async def test_request_before_ready_fails_fast(token_path):
    client = VTSClient(_settings(1, token_path))
    with pytest.raises(NotConnected) as exc_info:
        await client.request("CurrentModelRequest")
    assert exc_info.value.state == "disconnected"
    assert exc_info.value.retry_after_s == 0.05


@pytest.mark.asyncio
async def test_round_trip_after_bootstrap(vts, token_path):
    client = VTSClient(_settings(vts.port, token_path))
    client.start()
    try:
        assert await client.wait_ready(5.0)
        data = await client.request("CurrentModelRequest")
        assert data == {"modelLoaded": True, "modelName": "Akari"}

        status = client.status()
        assert status["state"] == "ready"
        assert status["authenticated"] is True
        assert status["tokenStored"] is True
        assert status["pendingRequests"] == 0
    finally:
        await client.stop()

    assert vts.token_requests == 1
    assert json.loads(token_path.read_text(encoding="utf-8"))["authenticationToken"] == "tok-1"


@pytest.mark.asyncio
async def test_api_error_surfaces_error_id(vts, token_path):
    client = VTSClient(_settings(vts.port, token_path))
    client.start()
    try:
        assert await client.wait_ready(5.0)
        with pytest.raises(APIError) as exc_info:
            await client.request("MoveModelRequest", {"timeInSeconds": 0, "valuesAreRelativeToModel": True})
        assert exc_info.value.error_id == 50
        # the session survives an API error
        assert client.is_ready
    finally:
        await client.stop()


@pytest.mark.asyncio
async def test_disconnect_fails_pending_immediately_and_reconnects(vts, token_path):
    client = VTSClient(_settings(vts.port, token_path))
    client.start()
    try:
        assert await client.wait_ready(5.0)
        loop = asyncio.get_running_loop()
        started = loop.time()
        with pytest.raises(ConnectionClosed):
            await client.request("StatisticsRequest")
        # well under the 5s request timeout
        assert loop.time() - started < 2.0
        assert client.correlator.pending_count == 0

        # the stored token is reused on the next session
        await asyncio.sleep(0.01)
        assert await client.wait_ready(5.0)
        assert client.transport.generation >= 2
        data = await client.request("CurrentModelRequest")
        assert data["modelName"] == "Akari"
    finally:
        await client.stop()

    assert vts.token_requests == 1
    assert vts.auth_tokens[:2] == ["tok-1", "tok-1"]

from __future__ import annotations

import json

import pytest

from conftest import FakeClient
from vts_mcp.core.errors import APIError, NotConnected
from vts_mcp.server.stdio import PROTOCOL_VERSION, MCPStdioServer
from vts_mcp.tools.catalog import build_registry


def _server(client=None):
    out = []
    server = MCPStdioServer(build_registry(client or FakeClient()), write=out.append)
    return server, out


def _envelope(resp):
    return json.loads(resp["result"]["content"][0]["text"])


def test_initialize():
    server, _ = _server()
    r = server.handle_request({"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}})
    assert r["id"] == 1
    assert r["result"]["protocolVersion"] == PROTOCOL_VERSION
    assert r["result"]["serverInfo"]["name"] == "vts-mcp"
    assert "tools" in r["result"]["capabilities"]


def test_notifications_get_no_response():
    server, _ = _server()
    assert server.handle_request({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None


def test_tools_list():
    server, _ = _server()
    r = server.handle_request({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})
    names = [t["name"] for t in r["result"]["tools"]]
    assert "getCurrentModel" in names
    assert "getConnectionStatus" in names


def test_protocol_errors():
    server, out = _server()
    server.handle_line("{not json")
    assert out[-1]["error"]["code"] == -32700

    r = server.handle_request({"jsonrpc": "1.0", "id": 3, "method": "ping"})
    assert r["error"]["code"] == -32600

    r = server.handle_request([1, 2])
    assert r["error"]["code"] == -32600

    r = server.handle_request({"jsonrpc": "2.0", "id": 4, "method": "does/not/exist"})
    assert r["error"]["code"] == -32601

    r = server.handle_request({"jsonrpc": "2.0", "id": 5, "method": "tools/call", "params": {}})
    assert r["error"]["code"] == -32602


def test_empty_lists_and_ping():
    server, _ = _server()
    assert server.handle_request({"jsonrpc": "2.0", "id": 6, "method": "ping"})["result"] == {}
    assert server.handle_request({"jsonrpc": "2.0", "id": 7, "method": "resources/list"})["result"] == {"resources": []}
    assert server.handle_request({"jsonrpc": "2.0", "id": 8, "method": "prompts/list"})["result"] == {"prompts": []}


def test_shutdown_and_exit_stop_the_loop():
    server, _ = _server()
    assert not server.should_stop
    server.handle_request({"jsonrpc": "2.0", "id": 9, "method": "shutdown"})
    assert server.should_stop

    server, _ = _server()
    assert server.handle_request({"jsonrpc": "2.0", "method": "exit"}) is None
    assert server.should_stop


@pytest.mark.asyncio
async def test_tool_call_success_envelope():
    client = FakeClient({"StatisticsRequest": {"uptime": 10}})
    server, _ = _server(client)
    r = await server.call_tool(10, "getVTSStatistics", {})
    assert r["result"]["isError"] is False
    env = _envelope(r)
    assert env["status"] == "success"
    assert env["operation"] == "getVTSStatistics"
    assert env["data"] == {"uptime": 10}
    assert "duration_ms" in env["metrics"]


@pytest.mark.asyncio
async def test_tool_call_not_connected():
    server, _ = _server(FakeClient(error=NotConnected("connecting", retry_after_s=3.0)))
    r = await server.call_tool(11, "getCurrentModel", {})
    assert r["result"]["isError"] is True
    err = _envelope(r)["error"]
    assert err["code"] == "not_connected"
    assert err["recoverable"] is True
    assert err["retry_after_ms"] == 3000


@pytest.mark.asyncio
async def test_tool_call_api_error_keeps_error_id():
    server, _ = _server(FakeClient(error=APIError(50, "No model loaded", "moveModel-1")))
    r = await server.call_tool(12, "getCurrentModel", {})
    err = _envelope(r)["error"]
    assert err["code"] == "api_error"
    assert err["details"]["errorID"] == 50
    assert err["details"]["message"] == "No model loaded"


@pytest.mark.asyncio
async def test_tool_call_unknown_tool_and_bad_arguments():
    server, _ = _server()
    r = await server.call_tool(13, "nope", {})
    assert r["result"]["isError"] is True
    assert _envelope(r)["error"]["code"] == "tool_not_found"

    r = await server.call_tool(14, "triggerHotkey", {})
    assert _envelope(r)["error"]["code"] == "invalid_params"


@pytest.mark.asyncio
async def test_tool_call_crash_becomes_internal_error():
    server, _ = _server(FakeClient(error=KeyError("boom")))
    r = await server.call_tool(15, "getCurrentModel", {})
    err = _envelope(r)["error"]
    assert err["code"] == "internal_error"
    assert err["recoverable"] is False


@pytest.mark.asyncio
async def test_tools_call_request_is_answered_asynchronously():
    server, out = _server(FakeClient({"VTSFolderInfoRequest": {"models": "Live2DModels"}}))
    resp = server.handle_request(
        {"jsonrpc": "2.0", "id": 16, "method": "tools/call", "params": {"name": "getVTSFolders", "arguments": {}}}
    )
    assert resp is None
    await server.drain()
    assert out[-1]["id"] == 16
    assert _envelope(out[-1])["data"] == {"models": "Live2DModels"}

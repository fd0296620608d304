import json
import os
import socket
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def _run(requests, tmp_path):
    # Nothing listens on the port, so the bridge stays disconnected.
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(ROOT / "src"), env.get("PYTHONPATH")]))
    env["VTS_MCP_PORT"] = str(_free_port())
    env["VTS_MCP_TOKEN_PATH"] = str(tmp_path / "auth_token.json")
    env["VTS_MCP_RECONNECT_DELAY_S"] = "0.2"
    p = subprocess.Popen(
        [sys.executable, "-m", "vts_mcp.server.stdio"],
        cwd=str(tmp_path),
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        env=env,
    )
    payload = "".join((r if isinstance(r, str) else json.dumps(r)) + "\n" for r in requests)
    try:
        out, err = p.communicate(payload, timeout=20)
    finally:
        p.kill()
    responses = [json.loads(line) for line in out.splitlines() if line.strip()]
    return p.returncode, {r.get("id"): r for r in responses}, err


def test_initialize_list_and_call_while_disconnected(tmp_path):
    rc, by_id, err = _run(
        [
            {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {"clientInfo": {"name": "pytest"}}},
            {"jsonrpc": "2.0", "method": "notifications/initialized"},
            {"jsonrpc": "2.0", "id": 2, "method": "tools/list"},
            {"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {"name": "getCurrentModel", "arguments": {}}},
            {"jsonrpc": "2.0", "id": 4, "method": "tools/call", "params": {"name": "getConnectionStatus"}},
        ],
        tmp_path,
    )
    assert rc == 0, err
    assert set(by_id) == {1, 2, 3, 4}
    assert by_id[1]["result"]["serverInfo"]["name"] == "vts-mcp"
    assert len(by_id[2]["result"]["tools"]) == 30

    call = by_id[3]["result"]
    assert call["isError"] is True
    assert json.loads(call["content"][0]["text"])["error"]["code"] == "not_connected"

    status = json.loads(by_id[4]["result"]["content"][0]["text"])["data"]
    assert status["authenticated"] is False
    assert status["tokenStored"] is False


def test_stdout_carries_only_protocol_frames(tmp_path):
    rc, by_id, err = _run(
        [
            "garbage",
            {"jsonrpc": "2.0", "id": 7, "method": "ping"},
            {"jsonrpc": "2.0", "id": 8, "method": "shutdown"},
        ],
        tmp_path,
    )
    assert rc == 0, err
    assert by_id[None]["error"]["code"] == -32700
    assert by_id[7]["result"] == {}
    assert by_id[8]["result"] == {}
    # logs go to stderr
    assert "vts-mcp" in err

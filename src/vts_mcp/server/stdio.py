"""
MCP JSON-RPC stdio server for VTube Studio.

stdin/stdout carry one JSON-RPC message per line; logs go to stderr.
Tool calls run as tasks so a slow VTube Studio request never blocks
``ping`` or other calls.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Callable, Dict, Optional, Set

from vts_mcp.config import Settings, load_settings
from vts_mcp.core.errors import ConfigError
from vts_mcp.core.safe_exec import safe_execute
from vts_mcp.logging import setup_logging
from vts_mcp.server.protocol import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    make_error_response,
    make_jsonrpc_response,
)
from vts_mcp.tools.catalog import build_registry
from vts_mcp.tools.registry import ToolRegistry
from vts_mcp.vts.client import VTSClient

_log = logging.getLogger("vts_mcp.server")

JSON = Dict[str, Any]

SERVER_NAME = "vts-mcp"
SERVER_VERSION = "0.1.0"
PROTOCOL_VERSION = "2024-11-05"


def _write(msg: JSON) -> None:
    sys.stdout.write(json.dumps(msg, ensure_ascii=False) + "\n")
    sys.stdout.flush()


class MCPStdioServer:
    def __init__(self, registry: ToolRegistry, *, write: Callable[[JSON], None] = _write) -> None:
        self._registry = registry
        self._write = write
        self._tasks: Set[asyncio.Task] = set()
        self.shutdown_requested = False
        self.exit_requested = False

    @property
    def should_stop(self) -> bool:
        return self.shutdown_requested or self.exit_requested

    def handle_line(self, line: str) -> None:
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            self._write(make_error_response(None, code=PARSE_ERROR, message="Invalid JSON"))
            return
        resp = self.handle_request(message)
        if resp is not None:
            self._write(resp)

    def handle_request(self, request: Any) -> Optional[JSON]:
        if not isinstance(request, dict):
            return make_error_response(None, code=INVALID_REQUEST, message="Request must be an object")

        method = request.get("method")
        request_id = request.get("id")
        params = request.get("params") or {}
        _log.debug("<- method=%s id=%s", method, request_id)

        if request.get("jsonrpc") != "2.0" or not isinstance(method, str):
            return make_error_response(request_id, code=INVALID_REQUEST, message="Invalid Request")

        if method.startswith("notifications/"):
            return None

        if method == "initialize":
            return make_jsonrpc_response(
                request_id,
                {
                    "protocolVersion": PROTOCOL_VERSION,
                    "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
                    "capabilities": {"tools": {}, "resources": {}, "prompts": {}},
                },
            )

        if method == "ping":
            return make_jsonrpc_response(request_id, {})

        if method == "tools/list":
            return make_jsonrpc_response(request_id, {"tools": self._registry.list_specs()})

        if method == "tools/call":
            if not isinstance(params, dict):
                return make_error_response(request_id, code=INVALID_PARAMS, message="params must be an object")
            name = params.get("name")
            if not isinstance(name, str) or not name:
                return make_error_response(request_id, code=INVALID_PARAMS, message="Tool name missing")
            self._spawn(request_id, name, params.get("arguments"))
            return None

        if method == "resources/list":
            return make_jsonrpc_response(request_id, {"resources": []})

        if method == "prompts/list":
            return make_jsonrpc_response(request_id, {"prompts": []})

        if method == "shutdown":
            self.shutdown_requested = True
            return make_jsonrpc_response(request_id, {})

        if method == "exit":
            self.exit_requested = True
            return make_jsonrpc_response(request_id, {}) if request_id is not None else None

        _log.warning("Unknown method: %s", method)
        return make_error_response(request_id, code=METHOD_NOT_FOUND, message="Method not found")

    # -------------------------
    # Tool calls
    # -------------------------

    def _spawn(self, request_id: Any, name: str, arguments: Any) -> None:
        task = asyncio.ensure_future(self._respond(request_id, name, arguments))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _respond(self, request_id: Any, name: str, arguments: Any) -> None:
        resp = await self.call_tool(request_id, name, arguments)
        if request_id is not None:
            self._write(resp)

    async def call_tool(self, request_id: Any, name: str, arguments: Any) -> JSON:
        _log.debug(
            "tools/call name=%s arg_keys=%s",
            name,
            list(arguments.keys()) if isinstance(arguments, dict) else type(arguments).__name__,
        )
        result = await safe_execute(name, lambda: self._registry.call(name, arguments))
        is_error = result.get("status") != "success"
        return make_jsonrpc_response(
            request_id,
            {
                "isError": is_error,
                "content": [{"type": "text", "text": json.dumps(result, ensure_ascii=False)}],
            },
        )

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


async def serve(settings: Settings) -> int:
    client = VTSClient(settings)
    server = MCPStdioServer(build_registry(client))
    client.start()
    _log.info("%s %s serving on stdio, VTube Studio at %s", SERVER_NAME, SERVER_VERSION, settings.url)
    try:
        while not server.should_stop:
            raw = await asyncio.to_thread(sys.stdin.readline)
            if not raw:
                _log.info("stdin closed")
                break
            line = raw.strip()
            if line:
                server.handle_line(line)
    finally:
        # Closing the session fails in-flight calls, whose responses still go out.
        await client.stop()
        await server.drain()
    return 0


def main(argv: Optional[list] = None) -> int:
    try:
        settings = load_settings(argv)
    except ConfigError as exc:
        sys.stderr.write(f"{SERVER_NAME}: {exc.message}\n")
        return 2
    setup_logging(settings.log_level, settings.log_file)
    try:
        return asyncio.run(serve(settings))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())

"""
Session transport: one WebSocket connection to VTube Studio at a time,
reconnected forever after a fixed delay.

    disconnected -> connecting -> open -> authenticating -> ready -> disconnected
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed as WSConnectionClosed
from websockets.exceptions import WebSocketException

from vts_mcp.core.errors import BridgeError, ConnectionClosed

_log = logging.getLogger("vts_mcp.session")

JSON = Dict[str, Any]

# VTube Studio item/model listings can be large.
MAX_MESSAGE_BYTES = 16 * 1024 * 1024


class SessionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    AUTHENTICATING = "authenticating"
    READY = "ready"


def default_connect(url: str) -> Awaitable[Any]:
    return websockets.connect(url, ping_interval=None, max_size=MAX_MESSAGE_BYTES)


class Session:
    """
    One connection lifetime. Once disconnected it never transitions again;
    reconnecting creates a new Session with a higher generation.
    """

    def __init__(self, generation: int) -> None:
        self.generation = generation
        self.state = SessionState.CONNECTING
        self.authenticated = False
        self.opened = False
        self._ws: Any = None

    @property
    def closed(self) -> bool:
        return self.state is SessionState.DISCONNECTED

    @property
    def is_ready(self) -> bool:
        return self.state is SessionState.READY

    def transition(self, state: SessionState) -> bool:
        if self.closed:
            return False
        self.state = state
        return True

    def attach(self, ws: Any) -> None:
        self._ws = ws
        self.opened = True
        self.transition(SessionState.OPEN)

    def mark_closed(self) -> bool:
        if self.closed:
            return False
        self.state = SessionState.DISCONNECTED
        self.authenticated = False
        return True

    async def send(self, message: JSON) -> None:
        if self._ws is None or self.closed:
            raise ConnectionClosed(f"Session {self.generation} is closed")
        _log.debug("-> %s %s", message.get("messageType"), message.get("requestID"))
        try:
            await self._ws.send(json.dumps(message))
        except WSConnectionClosed as exc:
            raise ConnectionClosed(f"Connection closed while sending: {exc}") from exc

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()

    def __aiter__(self):
        return self._ws.__aiter__()


class SessionTransport:
    def __init__(
        self,
        url: str,
        *,
        on_message: Callable[[JSON], Any],
        on_open: Callable[[Session], Awaitable[None]],
        on_close: Callable[[Session], Any],
        connect_timeout_s: float = 5.0,
        reconnect_delay_s: float = 3.0,
        connect: Optional[Callable[[str], Awaitable[Any]]] = None,
    ) -> None:
        self.url = url
        self.connect_timeout_s = connect_timeout_s
        self.reconnect_delay_s = reconnect_delay_s
        self._connect = connect or default_connect
        self._on_message = on_message
        self._on_open = on_open
        self._on_close = on_close
        self._session: Optional[Session] = None
        self._generation = 0
        self._ready = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._stopping = False

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state if self._session else SessionState.DISCONNECTED

    @property
    def generation(self) -> int:
        return self._generation

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._stopping = False
            self._task = asyncio.create_task(self.run(), name="vts-session-transport")
        return self._task

    async def stop(self) -> None:
        self._stopping = True
        if self._session is not None:
            await self._session.close()
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def wait_ready(self, timeout_s: Optional[float] = None) -> bool:
        try:
            await asyncio.wait_for(self._ready.wait(), timeout_s)
        except asyncio.TimeoutError:
            return False
        return True

    async def run(self) -> None:
        while not self._stopping:
            await self._run_session()
            if self._stopping:
                break
            _log.info("Reconnecting to %s in %.1fs", self.url, self.reconnect_delay_s)
            await asyncio.sleep(self.reconnect_delay_s)

    async def _open(self) -> Any:
        return await self._connect(self.url)

    async def _run_session(self) -> None:
        self._generation += 1
        session = Session(self._generation)
        self._session = session
        _log.info("Connecting to VTube Studio at %s (session %d)", self.url, session.generation)
        try:
            ws = await asyncio.wait_for(self._open(), self.connect_timeout_s)
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            _log.warning("Could not connect to %s: %s", self.url, exc or type(exc).__name__)
            self._mark_closed(session)
            return
        except Exception:
            _log.exception("Unexpected error connecting to %s", self.url)
            self._mark_closed(session)
            return

        session.attach(ws)
        _log.info("Connected to VTube Studio (session %d)", session.generation)
        reader = asyncio.create_task(self._read_loop(session))
        try:
            session.transition(SessionState.AUTHENTICATING)
            await self._on_open(session)
            if session.transition(SessionState.READY):
                self._ready.set()
                _log.info("Session %d authenticated and ready", session.generation)
                await reader
        except BridgeError as exc:
            _log.error("Session %d handshake failed: %s", session.generation, exc.message)
        except Exception:
            _log.exception("Session %d handshake crashed", session.generation)
        finally:
            self._ready.clear()
            await session.close()
            if not reader.done():
                reader.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reader
            self._mark_closed(session)

    async def _read_loop(self, session: Session) -> None:
        try:
            async for raw in session:
                try:
                    message = json.loads(raw)
                except ValueError:
                    _log.warning("Ignoring non-JSON frame from VTube Studio")
                    continue
                if not isinstance(message, dict):
                    _log.warning("Ignoring non-object frame from VTube Studio")
                    continue
                _log.debug("<- %s %s", message.get("messageType"), message.get("requestID"))
                self._on_message(message)
        except WSConnectionClosed as exc:
            _log.warning("Connection to VTube Studio lost: %s", exc)
        finally:
            self._mark_closed(session)

    def _mark_closed(self, session: Session) -> None:
        if not session.mark_closed():
            return
        self._ready.clear()
        if session.opened:
            _log.warning("Disconnected from VTube Studio (session %d)", session.generation)
            self._on_close(session)

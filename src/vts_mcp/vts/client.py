"""
VTSClient: the one long-lived service owning the VTube Studio connection.

Wires the session transport, the handshake, the correlator and the token
store together and exposes ``request()`` to the tool layer.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from vts_mcp.config import Settings
from vts_mcp.core.errors import ConnectionClosed, NotConnected
from vts_mcp.vts import protocol
from vts_mcp.vts.correlator import Correlator
from vts_mcp.vts.credentials import CredentialStore
from vts_mcp.vts.handshake import Authenticator
from vts_mcp.vts.session import Session, SessionTransport

_log = logging.getLogger("vts_mcp.client")

JSON = Dict[str, Any]


def _load_icon(settings: Settings) -> Optional[str]:
    if not settings.plugin_icon_path:
        return None
    try:
        return base64.b64encode(settings.plugin_icon_path.read_bytes()).decode("ascii")
    except OSError as exc:
        _log.error("Cannot read plugin icon %s: %s", settings.plugin_icon_path, exc)
        return None


class VTSClient:
    def __init__(
        self,
        settings: Settings,
        *,
        store: Optional[CredentialStore] = None,
        connect: Optional[Callable[[str], Awaitable[Any]]] = None,
    ) -> None:
        self.settings = settings
        self.store = store or CredentialStore(settings.token_path)
        self.correlator = Correlator(default_timeout_s=settings.request_timeout_s)
        self.authenticator = Authenticator(
            self.store,
            self.correlator,
            plugin_name=settings.plugin_name,
            plugin_developer=settings.plugin_developer,
            timeout_s=settings.handshake_timeout_s,
            plugin_icon=_load_icon(settings),
        )
        self.transport = SessionTransport(
            settings.url,
            on_message=self._on_message,
            on_open=self.authenticator.authenticate,
            on_close=self._on_close,
            connect_timeout_s=settings.connect_timeout_s,
            reconnect_delay_s=settings.reconnect_delay_s,
            connect=connect,
        )

    def _on_message(self, message: JSON) -> None:
        if self.correlator.dispatch(message):
            return
        message_type = str(message.get("messageType") or "")
        if message_type.endswith("Event"):
            _log.info("VTube Studio event %s: %s", message_type, message.get("data"))

    def _on_close(self, session: Session) -> None:
        self.correlator.fail_all(
            ConnectionClosed(f"Connection to VTube Studio closed (session {session.generation})")
        )

    # -------------------------
    # Lifecycle
    # -------------------------

    def start(self) -> None:
        self.transport.start()

    async def stop(self) -> None:
        await self.transport.stop()

    async def wait_ready(self, timeout_s: Optional[float] = None) -> bool:
        return await self.transport.wait_ready(timeout_s)

    @property
    def is_ready(self) -> bool:
        session = self.transport.session
        return session is not None and session.is_ready

    def status(self) -> JSON:
        session = self.transport.session
        return {
            "endpoint": self.settings.url,
            "state": self.transport.state.value,
            "authenticated": bool(session and session.authenticated),
            "session": self.transport.generation,
            "pendingRequests": self.correlator.pending_count,
            "tokenStored": self.store.exists(),
            "plugin": {
                "name": self.settings.plugin_name,
                "developer": self.settings.plugin_developer,
            },
        }

    # -------------------------
    # Requests
    # -------------------------

    async def request(
        self,
        message_type: str,
        data: Optional[JSON] = None,
        *,
        response_type: Optional[str] = None,
        timeout_s: Optional[float] = None,
        id_hint: Optional[str] = None,
    ) -> JSON:
        session = self.transport.session
        if session is None or not session.is_ready:
            raise NotConnected(self.transport.state.value, retry_after_s=self.settings.reconnect_delay_s)
        request_id = self.correlator.next_request_id(id_hint or message_type)
        message = protocol.make_request(message_type, request_id, data)
        return await self.correlator.issue(
            session,
            message,
            response_type or protocol.response_type_for(message_type),
            timeout_s if timeout_s is not None else self.settings.request_timeout_s,
        )

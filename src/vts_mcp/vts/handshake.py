"""
Authentication handshake, run once per opened session.

VTube Studio asks its user to approve a new plugin token out-of-band, so the
whole exchange gets one generous timeout rather than per-message ones.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from vts_mcp.core.errors import AuthenticationRejected, HandshakeTimeout
from vts_mcp.vts import protocol
from vts_mcp.vts.correlator import Correlator
from vts_mcp.vts.credentials import CredentialStore
from vts_mcp.vts.session import Session

_log = logging.getLogger("vts_mcp.handshake")

# One fresh token request after an explicit rejection, then give up.
MAX_REAUTH_ATTEMPTS = 1


class Authenticator:
    def __init__(
        self,
        store: CredentialStore,
        correlator: Correlator,
        *,
        plugin_name: str,
        plugin_developer: str,
        timeout_s: float = 10.0,
        plugin_icon: Optional[str] = None,
    ) -> None:
        self.store = store
        self.correlator = correlator
        self.plugin_name = plugin_name
        self.plugin_developer = plugin_developer
        self.timeout_s = timeout_s
        self.plugin_icon = plugin_icon

    async def authenticate(self, session: Session) -> None:
        try:
            await asyncio.wait_for(self._run(session), self.timeout_s)
        except asyncio.TimeoutError:
            # The stored token stays: a timeout says nothing about its validity.
            raise HandshakeTimeout(
                f"No authentication result within {self.timeout_s:g}s; "
                "is the plugin prompt waiting in VTube Studio?"
            ) from None
        session.authenticated = True
        _log.info("Authentication successful")

    async def _run(self, session: Session) -> None:
        cred = self.store.load()
        if cred is not None:
            _log.info("Using stored authentication token")
            token = cred.token
        else:
            token = await self._request_token(session)

        reauth_attempts = 0
        while True:
            result = await self._send_auth(session, token)
            if result.get("authenticated"):
                return
            reason = str(result.get("reason") or "")
            _log.error("Authentication failed: %s", reason or "no reason given")
            self.store.delete()
            if reauth_attempts >= MAX_REAUTH_ATTEMPTS:
                raise AuthenticationRejected(reason)
            reauth_attempts += 1
            _log.info("Attempting reauthentication with a new token")
            token = await self._request_token(session, hint="token-request-retry")

    def _identity(self) -> Dict[str, Any]:
        return {"pluginName": self.plugin_name, "pluginDeveloper": self.plugin_developer}

    async def _request_token(self, session: Session, hint: str = "token-request") -> str:
        _log.info("Requesting new authentication token; approve the plugin in VTube Studio")
        data = self._identity()
        if self.plugin_icon:
            data["pluginIcon"] = self.plugin_icon
        message = protocol.make_request(
            protocol.AUTH_TOKEN_REQUEST, self.correlator.next_request_id(hint), data
        )
        reply = await self.correlator.issue(session, message, protocol.AUTH_TOKEN_RESPONSE, timeout_s=None)
        token = reply.get("authenticationToken")
        if not isinstance(token, str) or not token:
            raise AuthenticationRejected("AuthenticationTokenResponse carried no token")
        try:
            self.store.save(token)
        except OSError as exc:
            # Still usable for this session; the next handshake will ask again.
            _log.error("Error saving token to %s: %s", self.store.path, exc)
        return token

    async def _send_auth(self, session: Session, token: str) -> Dict[str, Any]:
        data = {**self._identity(), "authenticationToken": token}
        message = protocol.make_request(
            protocol.AUTH_REQUEST, self.correlator.next_request_id("auth-request"), data
        )
        return await self.correlator.issue(session, message, protocol.AUTH_RESPONSE, timeout_s=None)

import pytest

from conftest import FakeSession, api_error, reply_to
from vts_mcp.core.errors import APIError, AuthenticationRejected, HandshakeTimeout
from vts_mcp.vts import protocol
from vts_mcp.vts.credentials import CredentialStore
from vts_mcp.vts.handshake import Authenticator


class FakeVTS:
    """Answers token and auth requests; ``valid`` lists the accepted tokens."""

    def __init__(self, issued=("fresh-token",), valid=("fresh-token",), answer_auth=True):
        self.issued = list(issued)
        self.valid = set(valid)
        self.answer_auth = answer_auth

    def __call__(self, message):
        mt = message["messageType"]
        if mt == protocol.AUTH_TOKEN_REQUEST:
            return reply_to(message, protocol.AUTH_TOKEN_RESPONSE, {"authenticationToken": self.issued.pop(0)})
        if mt == protocol.AUTH_REQUEST:
            if not self.answer_auth:
                return None
            token = message["data"]["authenticationToken"]
            if token in self.valid:
                return reply_to(message, protocol.AUTH_RESPONSE, {"authenticated": True, "reason": ""})
            return reply_to(
                message,
                protocol.AUTH_RESPONSE,
                {"authenticated": False, "reason": "Token invalid or revoked"},
            )
        raise AssertionError(f"unexpected {mt}")


def _authenticator(store, correlator, **kw):
    kw.setdefault("timeout_s", 2.0)
    return Authenticator(store, correlator, plugin_name="TestPlugin", plugin_developer="Tester", **kw)


@pytest.mark.asyncio
async def test_stored_token_is_reused(token_path, correlator):
    store = CredentialStore(token_path)
    store.save("stored-token")
    session = FakeSession(correlator, FakeVTS(issued=(), valid=("stored-token",)))

    await _authenticator(store, correlator).authenticate(session)

    assert session.sent_types == [protocol.AUTH_REQUEST]
    data = session.sent[0]["data"]
    assert data == {
        "pluginName": "TestPlugin",
        "pluginDeveloper": "Tester",
        "authenticationToken": "stored-token",
    }
    assert session.authenticated is True


@pytest.mark.asyncio
async def test_bootstrap_requests_and_persists_token(token_path, correlator):
    store = CredentialStore(token_path)
    session = FakeSession(correlator, FakeVTS())

    await _authenticator(store, correlator).authenticate(session)

    assert session.sent_types == [protocol.AUTH_TOKEN_REQUEST, protocol.AUTH_REQUEST]
    assert "pluginIcon" not in session.sent[0]["data"]
    assert store.load().token == "fresh-token"
    assert session.authenticated is True


@pytest.mark.asyncio
async def test_plugin_icon_is_sent_with_token_request(token_path, correlator):
    store = CredentialStore(token_path)
    session = FakeSession(correlator, FakeVTS())

    await _authenticator(store, correlator, plugin_icon="aWNvbg==").authenticate(session)

    assert session.sent[0]["data"]["pluginIcon"] == "aWNvbg=="


@pytest.mark.asyncio
async def test_rejected_token_is_replaced_once(token_path, correlator):
    store = CredentialStore(token_path)
    store.save("revoked-token")
    session = FakeSession(correlator, FakeVTS())

    await _authenticator(store, correlator).authenticate(session)

    assert session.sent_types == [protocol.AUTH_REQUEST, protocol.AUTH_TOKEN_REQUEST, protocol.AUTH_REQUEST]
    assert session.sent[2]["data"]["authenticationToken"] == "fresh-token"
    assert store.load().token == "fresh-token"


@pytest.mark.asyncio
async def test_second_rejection_fails_and_clears_token(token_path, correlator):
    store = CredentialStore(token_path)
    store.save("revoked-token")
    session = FakeSession(correlator, FakeVTS(issued=("also-bad",), valid=()))

    with pytest.raises(AuthenticationRejected) as exc_info:
        await _authenticator(store, correlator).authenticate(session)

    assert exc_info.value.reason == "Token invalid or revoked"
    assert session.sent_types == [protocol.AUTH_REQUEST, protocol.AUTH_TOKEN_REQUEST, protocol.AUTH_REQUEST]
    assert store.exists() is False
    assert session.authenticated is False


@pytest.mark.asyncio
async def test_timeout_keeps_stored_token(token_path, correlator):
    store = CredentialStore(token_path)
    store.save("maybe-valid")
    session = FakeSession(correlator, FakeVTS(answer_auth=False))

    with pytest.raises(HandshakeTimeout):
        await _authenticator(store, correlator, timeout_s=0.05).authenticate(session)

    assert store.load().token == "maybe-valid"
    assert correlator.pending_count == 0
    assert session.authenticated is False


@pytest.mark.asyncio
async def test_api_error_during_token_request_propagates(token_path, correlator):
    store = CredentialStore(token_path)
    session = FakeSession(correlator, lambda m: api_error(m, 53, "User denied plugin access"))

    with pytest.raises(APIError) as exc_info:
        await _authenticator(store, correlator).authenticate(session)

    assert exc_info.value.error_id == 53
    assert store.exists() is False

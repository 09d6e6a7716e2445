import pytest

from shared.protocol import (
    HandshakeStateMachine,
    HandshakeStatus,
    ResponderHandshake,
    legacy_welcome_token,
    parse_frame,
)


def test_hello_is_requested_once_per_connect():
    machine = HandshakeStateMachine()
    machine.begin_connect()
    assert machine.status == HandshakeStatus.CONNECTING
    assert machine.on_transport_ready() is True
    assert machine.status == HandshakeStatus.AWAITING_WELCOME
    assert machine.on_transport_ready() is False

    machine.begin_connect()
    assert machine.on_transport_ready() is True


def test_welcome_completes_handshake():
    machine = HandshakeStateMachine()
    machine.begin_connect()
    machine.on_transport_ready()
    assert machine.can_send(True) is False

    token = machine.welcome_token(parse_frame("CME1|WELCOME|abc123"))
    assert token == "abc123"
    machine.accept_welcome(token)
    assert machine.handshake_ok
    assert machine.session_id == "abc123"
    assert machine.status == HandshakeStatus.HANDSHAKEN
    assert machine.can_send(True) is True
    assert machine.can_send(False) is False


def test_reset_clears_session():
    machine = HandshakeStateMachine()
    machine.begin_connect()
    machine.accept_welcome("tok")
    machine.reset()
    assert not machine.handshake_ok
    assert machine.session_id == ""
    assert machine.status == HandshakeStatus.DISCONNECTED


@pytest.mark.parametrize(
    "line,token",
    [
        ("WELCOME abc123", "abc123"),
        ("WELCOME", ""),
        ("WELCOME|tok", "tok"),
        ("CME0|WELCOME|tok", "tok"),
        ("CME0|WELCOME", ""),
    ],
)
def test_legacy_welcome_forms(line, token):
    assert legacy_welcome_token(line) == token
    assert HandshakeStateMachine().welcome_token(parse_frame(line)) == token


@pytest.mark.parametrize(
    "line",
    ["hello WELCOME friend", "we said WELCOME|x", "CME1|TEXT|WELCOME abc", "plain text"],
)
def test_non_welcome_lines(line):
    assert HandshakeStateMachine().welcome_token(parse_frame(line)) is None


def test_responder_mints_token_on_hello():
    responder = ResponderHandshake()
    token = responder.on_hello("iPhone|P2")
    assert len(token) == 8
    int(token, 16)
    assert responder.handshake_ok
    assert responder.session_id == token
    assert (responder.device, responder.version) == ("iPhone", "P2")

    reissued = responder.on_hello("iPhone|P3")
    assert responder.session_id == reissued
    assert responder.version == "P3"


def test_responder_hello_without_version():
    responder = ResponderHandshake()
    responder.on_hello("legacy-device")
    assert responder.device == "legacy-device"
    assert responder.version == "?"
    responder.reset()
    assert not responder.handshake_ok
    assert responder.session_id == ""

import pytest

from client.config import DEFAULT_CONFIG
from client.core import ClientSession, NetworkError, SendResult
from shared.codecs import SessionParameters, build_registry
from shared.protocol import Direction, build_text, encode_line
from shared.protocol.errors import ErrorCode, ProtocolError, StatusCode


class FakeTransport:
    def __init__(self):
        self.events = None
        self.opened = []
        self.closed = 0
        self.sent = []
        self.fail_reason = ""

    def bind(self, events):
        self.events = events

    def open(self, host, port):
        self.opened.append((host, port))

    def close(self):
        self.closed += 1

    def send(self, data):
        if self.fail_reason:
            return SendResult(False, self.fail_reason)
        self.sent.append(data)
        return SendResult(True)


def _session(codec="cme2"):
    transport = FakeTransport()
    config = {**DEFAULT_CONFIG, "codec": codec, "device_label": "tester", "protocol_version": "P2"}
    session = ClientSession(transport, config=config, params=SessionParameters())
    return session, transport


def _handshaken(codec="cme2"):
    session, transport = _session(codec)
    session.connect("127.0.0.1", 5555)
    session.on_ready()
    session.on_data_received(b"CME1|WELCOME|abc123\n")
    return session, transport


def _texts(session, direction=None):
    return [m.text for m in session.state.messages if direction is None or m.direction == direction]


def test_connect_opens_transport_and_sends_hello_once():
    session, transport = _session()
    assert transport.events is session

    session.connect("10.0.0.2", 6000)
    assert transport.opened == [("10.0.0.2", 6000)]
    assert session.state.status == "connecting..."

    session.on_ready()
    session.on_ready()
    assert transport.sent == [b"CME1|HELLO|tester|P2\n"]
    assert _texts(session, Direction.OUT) == ["HELLO"]


def test_send_without_connection():
    session, transport = _session()
    assert session.send_text("hi") is False
    assert session.state.status == "not connected"
    assert transport.sent == []


def test_send_blocked_before_welcome():
    session, transport = _session()
    session.connect("127.0.0.1", 5555)
    session.on_ready()
    assert session.send_text("hi") is False
    assert session.state.status == "blocked: no handshake"
    assert transport.sent == [b"CME1|HELLO|tester|P2\n"]


def test_send_after_welcome():
    session, transport = _handshaken()
    assert session.state.handshake_ok
    assert session.state.session_id == "abc123"
    assert session.state.status == "handshake ok"

    assert session.send_text("hi") is True
    assert transport.sent[-1].startswith(b"CME1|TEXT|CME2|m=5|p=6|rem=4|q=")
    assert transport.sent[-1].endswith(b"\n")
    assert session.state.messages[-1].direction == Direction.OUT
    assert session.state.messages[-1].text == "hi"
    assert session.state.status == "sent"


def test_legacy_welcome_split_across_chunks():
    session, _ = _session()
    session.connect("127.0.0.1", 5555)
    session.on_ready()
    session.on_data_received(b"WELC")
    assert not session.state.handshake_ok
    session.on_data_received(b"OME tok42\n")
    assert session.state.handshake_ok
    assert session.state.session_id == "tok42"
    assert _texts(session, Direction.IN) == ["WELCOME tok42"]


def test_codec_error_is_not_transmitted():
    session, transport = _handshaken()
    sent_before = list(transport.sent)
    assert session.send_text("123456789") is False
    assert session.state.status.startswith("codec error: CME2|ERR=TOO_LONG")
    assert transport.sent == sent_before


def test_other_codec_has_no_length_limit():
    session, transport = _handshaken(codec="m3")
    assert session.send_text("a much longer message than eight bytes") is True
    assert transport.sent[-1].startswith(b"CME1|TEXT|M3:")


def test_transport_send_failure():
    session, transport = _handshaken()
    transport.fail_reason = "boom"
    assert session.send_text("hi") is False
    assert session.state.status == "send failed: boom"
    assert _texts(session, Direction.OUT) == ["HELLO"]


def test_inbound_text_decoded_in_order():
    session, _ = _handshaken()
    registry = build_registry()
    chunk = encode_line(build_text(registry.encode("yo", "m3"))) + encode_line(build_text("plain words"))
    session.on_data_received(chunk)
    assert _texts(session, Direction.IN)[-2:] == ["yo", "plain words"]
    assert session.state.messages[-1].integrity_ok


def test_inbound_integrity_failure_still_delivered():
    session, _ = _handshaken()
    payload = build_registry().encode("hi")
    tampered = payload[:-1] + ("0" if payload[-1] != "0" else "1")
    session.on_data_received(encode_line(build_text(tampered)))
    last = session.state.messages[-1]
    assert last.text == "hi"
    assert last.integrity_ok is False
    assert str(last) == "IN hi [integrity?]"


def test_inbound_unframed_line_and_ack():
    session, _ = _handshaken()
    session.on_data_received(b"hello there\nCME1|ACK\nCME1|PING|1\n")
    assert _texts(session, Direction.IN)[-3:] == ["hello there", "ACK", "CME1|PING|1"]


def test_text_before_welcome_is_still_received():
    session, _ = _session()
    session.connect("127.0.0.1", 5555)
    session.on_ready()
    session.on_data_received(b"CME1|TEXT|early\n")
    assert _texts(session, Direction.IN) == ["early"]
    assert not session.state.handshake_ok


def test_peer_close_tears_down_session():
    session, transport = _handshaken()
    session.on_data_received(b"CME1|TEXT|par")
    session.on_closed()
    assert session.state.status == "peer closed"
    assert not session.state.handshake_ok
    assert session.state.session_id == ""
    assert session.send_text("hi") is False

    session.connect("127.0.0.1", 5555)
    assert session.state.messages == []
    session.on_ready()
    session.on_data_received(b"tial\n")
    assert _texts(session, Direction.IN) == ["tial"]


def test_transport_failure_reports_reason():
    session, _ = _handshaken()
    session.on_failed(NetworkError(StatusCode.SERVICE_UNAVAILABLE, ErrorCode.NOT_CONNECTED, "refused"))
    assert session.state.status == "failed: refused"
    assert not session.state.handshake_ok


def test_disconnect_closes_transport():
    session, transport = _handshaken()
    session.disconnect()
    assert transport.closed == 1
    assert session.state.status == "idle"
    assert not session.connected


def test_listeners_are_notified_and_isolated():
    session, _ = _session()
    seen = []

    def broken(state):
        raise RuntimeError("listener bug")

    session.add_listener(broken)
    session.add_listener(lambda state: seen.append(state.status))
    session.connect("127.0.0.1", 5555)
    session.on_ready()
    assert seen[:2] == ["connecting...", "connected"]

    session.remove_listener(broken)


def test_set_codec_validates_name():
    session, _ = _session()
    session.set_codec("U64")
    assert session.codec_name == "u64"
    with pytest.raises(ProtocolError):
        session.set_codec("rot13")


def test_parameters_fixed_after_handshake():
    session, _ = _session()
    session.apply_session_parameters(SessionParameters(modulus=7))
    assert session.registry.encode("hi").startswith("CME2|m=7|")

    session.connect("127.0.0.1", 5555)
    session.on_ready()
    session.on_data_received(b"CME1|WELCOME|t\n")
    with pytest.raises(ProtocolError) as excinfo:
        session.apply_session_parameters(SessionParameters())
    assert excinfo.value.status == StatusCode.CONFLICT


@pytest.mark.parametrize("port", [0, -1, 70000])
def test_connect_rejects_out_of_range_port(port):
    session, transport = _handshaken()
    session.connect("127.0.0.1", port)
    assert transport.opened == [("127.0.0.1", 5555)]
    assert transport.closed == 1
    assert session.state.status == "failed: bad port"
    assert not session.state.handshake_ok
    assert session.send_text("hi") is False

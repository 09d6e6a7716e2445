import pytest

from shared.protocol import (
    ErrorCode,
    FrameType,
    LineReassembler,
    ProtocolError,
    StatusCode,
    build_ack,
    build_frame,
    build_hello,
    build_text,
    build_welcome,
    encode_line,
    parse_frame,
)


def test_build_frames():
    assert build_hello("iPhone", "P2") == "CME1|HELLO|iPhone|P2"
    assert build_text("hello world") == "CME1|TEXT|hello world"
    assert build_welcome("abc123") == "CME1|WELCOME|abc123"
    assert build_ack() == "CME1|ACK"
    assert build_frame("HELLO_ACK", "ok") == "CME1|HELLO_ACK|ok"


def test_text_frame_keeps_pipes_in_payload():
    payload = "CME2|m=5|p=6|rem=4|q=00c0ffeebadc1a04|c=0d8f5c1b"
    frame = parse_frame(build_text(payload))
    assert frame.type == FrameType.TEXT
    assert frame.payload == payload


def test_build_rejects_newline():
    with pytest.raises(ProtocolError):
        build_text("two\nlines")


@pytest.mark.parametrize("line", ["ACK", "CME1|ACK", "CME1|ACK|extra", "  ACK \r"])
def test_parse_ack(line):
    frame = parse_frame(line)
    assert frame.type == FrameType.ACK
    assert frame.payload == ""


def test_unframed_line_is_text():
    frame = parse_frame("  hello there \r")
    assert frame.type == FrameType.TEXT
    assert frame.payload == "hello there"
    assert frame.raw == "hello there"


def test_parse_hello_keeps_device_and_version():
    frame = parse_frame("CME1|HELLO|iPhone|P2")
    assert frame.is_type(FrameType.HELLO)
    assert frame.payload == "iPhone|P2"


def test_parse_short_and_custom_types():
    assert parse_frame("CME1|").type == FrameType.UNKNOWN

    custom = parse_frame("CME1|PING|1")
    assert custom.type_text == "PING"
    assert custom.payload == "1"

    bare = parse_frame("CME1|WELCOME")
    assert bare.type == FrameType.WELCOME
    assert bare.payload == ""


def test_encode_line_appends_single_delimiter():
    assert encode_line("CME1|ACK") == b"CME1|ACK\n"
    assert encode_line("CME1|ACK\n") == b"CME1|ACK\n"
    assert encode_line("héllo") == "héllo\n".encode("utf-8")


def test_reassembler_joins_split_chunks():
    reassembler = LineReassembler()
    reassembler.feed(b"CME1|TEXT|x")
    assert list(reassembler.drain_lines()) == []
    reassembler.feed(b"\n")
    assert list(reassembler.drain_lines()) == ["CME1|TEXT|x"]
    assert reassembler.pending == 0


def test_reassembler_skips_blank_lines_and_keeps_tail():
    reassembler = LineReassembler()
    reassembler.feed(b"a\r\n\n   \nb\nc")
    assert list(reassembler.drain_lines()) == ["a", "b"]
    assert reassembler.pending == 1
    reassembler.feed(b"d\n")
    assert list(reassembler.drain_lines()) == ["cd"]


def test_reassembler_drops_undecodable_lines():
    reassembler = LineReassembler()
    reassembler.feed(b"\xff\xfe\nok\n")
    assert list(reassembler.drain_lines()) == ["ok"]


def test_reassembler_handles_multibyte_split():
    reassembler = LineReassembler()
    reassembler.feed(b"caf\xc3")
    assert list(reassembler.drain_lines()) == []
    reassembler.feed(b"\xa9\n")
    assert list(reassembler.drain_lines()) == ["café"]


def test_reassembler_clear_discards_partial_line():
    reassembler = LineReassembler()
    reassembler.feed(b"CME1|TEXT|par")
    reassembler.clear()
    reassembler.feed(b"tial\n")
    assert list(reassembler.drain_lines()) == ["tial"]


def test_protocol_error_payload():
    error = ProtocolError(StatusCode.BAD_REQUEST, ErrorCode.UNKNOWN_CODEC, "Unknown codec 'rot13'")
    assert error.to_payload() == {
        "status": 400,
        "error_code": "UNKNOWN_CODEC",
        "error_message": "Unknown codec 'rot13'",
    }
    assert ProtocolError(StatusCode.INTERNAL_ERROR).to_payload()["error_code"] is None

import io

import pytest

from tinyredis.parser import Payload, ProtocolError, parse_stream
from tinyredis.reply import (
    BulkReply,
    EmptyMultiBulkReply,
    MultiBulkReply,
    StandardErrReply,
    StatusReply,
)


def parse_all(data: bytes) -> list[Payload]:
    return list(parse_stream(io.BytesIO(data)))


def test_multi_bulk_request():
    payloads = parse_all(b"*3\r\n$3\r\nSET\r\n$3\r\nkey\r\n$5\r\nvalue\r\n")
    assert payloads[0].data == MultiBulkReply([b"SET", b"key", b"value"])
    assert payloads[0].err is None
    assert isinstance(payloads[1].err, EOFError)
    assert len(payloads) == 2


def test_empty_multi_bulk():
    payloads = parse_all(b"*0\r\n")
    assert payloads[0].data == EmptyMultiBulkReply()


def test_bulk_string():
    payloads = parse_all(b"$4\r\nPING\r\n")
    assert payloads[0].data == BulkReply(b"PING")


def test_status_and_error_lines():
    payloads = parse_all(b"+OK\r\n-ERR bad\r\n")
    assert payloads[0].data == StatusReply("OK")
    assert payloads[1].data == StandardErrReply("ERR bad")


def test_integer_line_gives_empty_payload():
    payloads = parse_all(b":5\r\n")
    assert payloads[0].data is None
    assert payloads[0].err is None


def test_bad_integer_line_is_protocol_error():
    payloads = parse_all(b":x\r\n")
    assert isinstance(payloads[0].err, ProtocolError)
    assert str(payloads[0].err) == "Protocol error: :x\r\n"
    assert payloads[0].data is None
    assert len(payloads) == 2


def test_bad_header_message():
    payloads = parse_all(b"*x\r\n")
    assert isinstance(payloads[0].err, ProtocolError)
    assert str(payloads[0].err) == "Protocol error: *x\r\n"
    assert payloads[0].err.line == b"*x\r\n"


def test_line_without_carriage_return():
    payloads = parse_all(b"PING\n")
    assert isinstance(payloads[0].err, ProtocolError)
    assert str(payloads[0].err) == "Protocol error: PING\n"
    assert isinstance(payloads[1].err, EOFError)
    assert len(payloads) == 2


@pytest.mark.parametrize("header", [b"$0\r\n", b"$-2\r\n", b"$abc\r\n", b"*-1\r\n"])
def test_invalid_headers(header):
    payloads = parse_all(header)
    assert isinstance(payloads[0].err, ProtocolError)
    assert payloads[0].err.line == header
    assert str(payloads[0].err) == "Protocol error: " + header.decode()
    assert len(payloads) == 2


def test_null_bulk_header_yields_nothing():
    payloads = parse_all(b"$-1\r\n")
    assert len(payloads) == 1
    assert isinstance(payloads[0].err, EOFError)


def test_recovers_after_error():
    payloads = parse_all(b"*x\r\n*1\r\n$4\r\nPING\r\n")
    assert isinstance(payloads[0].err, ProtocolError)
    assert payloads[1].data == MultiBulkReply([b"PING"])
    assert isinstance(payloads[2].err, EOFError)


def test_empty_stream():
    payloads = parse_all(b"")
    assert len(payloads) == 1
    assert isinstance(payloads[0].err, EOFError)


def test_partial_line_ends_stream():
    payloads = parse_all(b"*1\r\n$4\r\nPI")
    assert len(payloads) == 1
    assert isinstance(payloads[0].err, EOFError)


def test_read_failure_is_reported():
    failure = ConnectionResetError("reset")

    class Broken:
        def readline(self):
            raise failure

    payloads = list(parse_stream(Broken()))
    assert len(payloads) == 1
    assert payloads[0].err is failure


@pytest.mark.parametrize(
    "args",
    [
        [b"PING"],
        [b"SET", b"key", b"value"],
        [b"DEL", b"a", b"b", b"c", b"d"],
        [b"GET", b"\xff\x00binary"],
    ],
)
def test_round_trip(args):
    payloads = parse_all(MultiBulkReply(args).to_bytes())
    assert payloads[0].data == MultiBulkReply(args)


def test_empty_argument_inside_array():
    payloads = parse_all(b"*2\r\n$3\r\nGET\r\n$0\r\n")
    assert payloads[0].data == MultiBulkReply([b"GET", b""])
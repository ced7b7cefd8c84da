"""Streaming parser for RESP requests read from a binary stream."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, Protocol

from tinyredis.reply import (
    BulkReply,
    EmptyMultiBulkReply,
    MultiBulkReply,
    Reply,
    StandardErrReply,
    StatusReply,
)

_UINT_RE = re.compile(rb"[0-9]+")
_INT_RE = re.compile(rb"[+-]?[0-9]+")


class _LineReader(Protocol):
    def readline(self) -> bytes:
        """Return the next line, including its newline."""


class ProtocolError(Exception):
    """The client sent a line that is not valid RESP."""

    def __init__(self, line: bytes) -> None:
        self.line = bytes(line)
        super().__init__("Protocol error: " + self.line.decode("utf-8", "replace"))


@dataclass
class Payload:
    """One parsed request, or the error met while reading it."""

    data: Reply | None = None
    err: Exception | None = None


@dataclass
class _ReadState:
    reading_multi_line: bool = False
    expected_args_count: int = 0
    msg_type: bytes = b""
    args: list[bytes] = field(default_factory=list)

    @property
    def finished(self) -> bool:
        return self.expected_args_count > 0 and len(self.args) == self.expected_args_count


def _parse_uint32(text: bytes, line: bytes) -> int:
    if not _UINT_RE.fullmatch(text):
        raise ProtocolError(line)
    number = int(text)
    if number >= 2**32:
        raise ProtocolError(line)
    return number


def _parse_int64(text: bytes, line: bytes) -> int:
    if not _INT_RE.fullmatch(text):
        raise ProtocolError(line)
    number = int(text)
    if not -(2**63) <= number < 2**63:
        raise ProtocolError(line)
    return number


def _single_line(line: bytes) -> Payload:
    text = line[:-2]
    kind = text[:1]
    if kind == b"+":
        return Payload(StatusReply(text[1:].decode("utf-8", "replace")))
    if kind == b"-":
        return Payload(StandardErrReply(text[1:].decode("utf-8", "replace")))
    if kind == b":":
        _parse_int64(text[1:], line)
    return Payload()


def _read_body(line: bytes, state: _ReadState) -> None:
    body = line[:-2]
    if body.startswith(b"$"):
        if _parse_int64(body[1:], line) <= 0:
            state.args.append(b"")
    else:
        state.args.append(body)


def _feed(state: _ReadState, line: bytes) -> Payload | None:
    """Advance the state by one line; return a payload once one is complete."""
    if len(line) < 2 or line[-2:-1] != b"\r":
        raise ProtocolError(line)

    if state.reading_multi_line:
        _read_body(line, state)
        if not state.finished:
            return None
        if state.msg_type == b"*":
            return Payload(MultiBulkReply(state.args))
        return Payload(BulkReply(state.args[0]))

    kind = line[:1]
    if kind == b"*":
        count = _parse_uint32(line[1:-2], line)
        if count == 0:
            return Payload(EmptyMultiBulkReply())
        state.msg_type = kind
        state.reading_multi_line = True
        state.expected_args_count = count
        state.args = []
        return None
    if kind == b"$":
        length = _parse_int64(line[1:-2], line)
        if length == -1:
            return None
        if length <= 0:
            raise ProtocolError(line)
        state.msg_type = kind
        state.reading_multi_line = True
        state.expected_args_count = 1
        state.args = []
        return None
    return _single_line(line)


def parse_stream(reader: _LineReader) -> Iterator[Payload]:
    """Yield payloads read from ``reader`` until it ends or fails.

    The last payload carries an ``EOFError`` when the stream ends, or the
    ``OSError`` that reading raised.
    """
    state = _ReadState()
    while True:
        try:
            line = reader.readline()
        except OSError as exc:
            yield Payload(err=exc)
            return
        if not line.endswith(b"\n"):
            yield Payload(err=EOFError("EOF"))
            return
        try:
            payload = _feed(state, bytes(line))
        except ProtocolError as exc:
            yield Payload(err=exc)
            state = _ReadState()
            continue
        if payload is not None:
            yield payload
            state = _ReadState()
"""RESP reply values and their wire encoding."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

CRLF = b"\r\n"
_NULL_BULK = b"$-1"


class Reply(ABC):
    """A value that can be written to a client in RESP form."""

    @abstractmethod
    def to_bytes(self) -> bytes:
        """Encode the reply for the wire."""


@dataclass
class PongReply(Reply):
    """Answer to PING."""

    def to_bytes(self) -> bytes:
        return b"+PONG\r\n"


@dataclass
class OkReply(Reply):
    """The +OK status."""

    def to_bytes(self) -> bytes:
        return b"+OK\r\n"


@dataclass
class NullBulkReply(Reply):
    """A nil bulk string."""

    def to_bytes(self) -> bytes:
        return b"$-1\r\n"


@dataclass
class EmptyMultiBulkReply(Reply):
    """An array with no elements."""

    def to_bytes(self) -> bytes:
        return b"$0\r\n"


@dataclass
class NoReply(Reply):
    """A reply that writes nothing."""

    def to_bytes(self) -> bytes:
        return b""


class ErrorReply(Reply):
    """A reply that reports an error to the client."""

    @property
    @abstractmethod
    def message(self) -> str:
        """The error text."""

    def __str__(self) -> str:
        return self.message


@dataclass
class UnknownErrReply(ErrorReply):
    """An error of unknown cause."""

    @property
    def message(self) -> str:
        return "Err unknown"

    def to_bytes(self) -> bytes:
        return b"-Err unknown\r\n"


@dataclass
class ArgNumErrReply(ErrorReply):
    """A command was called with the wrong number of arguments."""

    cmd: str

    @property
    def message(self) -> str:
        return f"-ERR wrong number of arguments for '{self.cmd}' command\r\n"

    def to_bytes(self) -> bytes:
        return self.message.encode()


@dataclass
class SyntaxErrReply(ErrorReply):
    """A command had a syntax error."""

    @property
    def message(self) -> str:
        return "Err syntax error"

    def to_bytes(self) -> bytes:
        return b"-Err syntax error\r\n"


@dataclass
class WrongTypeErrReply(ErrorReply):
    """An operation was applied to a key holding another kind of value."""

    @property
    def message(self) -> str:
        return "WRONGTYPE Operation against a key holding the wrong kind of value"

    def to_bytes(self) -> bytes:
        # The terminator is written as escaped text, not as CR LF.
        return rb"-WRONGTYPE Operation against a key holding the wrong kind of value\r\n"


@dataclass
class ProtocolErrReply(ErrorReply):
    """The client sent something that is not valid RESP."""

    msg: str

    @property
    def message(self) -> str:
        return f"ERR Protocol error: '{self.msg}"

    def to_bytes(self) -> bytes:
        return f"-ERR Protocol error: '{self.msg}'\r\n".encode()


@dataclass
class StandardErrReply(ErrorReply):
    """An error with free-form text."""

    status: str

    @property
    def message(self) -> str:
        return self.status

    def to_bytes(self) -> bytes:
        return b"-" + self.status.encode() + CRLF


@dataclass
class BulkReply(Reply):
    """A single binary-safe string."""

    arg: bytes | None

    def to_bytes(self) -> bytes:
        if not self.arg:
            return _NULL_BULK
        return b"$" + str(len(self.arg)).encode() + CRLF + bytes(self.arg) + CRLF


@dataclass
class MultiBulkReply(Reply):
    """An array of bulk strings; None elements are written as nil."""

    args: list[bytes | None] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        parts = [b"*" + str(len(self.args)).encode() + CRLF]
        for arg in self.args:
            if arg is None:
                parts.append(_NULL_BULK + CRLF)
            else:
                parts.append(b"$" + str(len(arg)).encode() + CRLF + bytes(arg) + CRLF)
        return b"".join(parts)


@dataclass
class StatusReply(Reply):
    """A simple status string."""

    status: str

    def to_bytes(self) -> bytes:
        return b"+" + self.status.encode() + CRLF


@dataclass
class IntReply(Reply):
    """An integer."""

    code: int

    def to_bytes(self) -> bytes:
        return b":" + str(self.code).encode() + CRLF


def is_error_reply(reply: Reply) -> bool:
    """Tell whether the reply encodes an error."""
    return reply.to_bytes().startswith(b"-")
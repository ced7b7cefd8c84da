"""A single keyspace and the commands that run against it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence

from tinyredis.reply import (
    ArgNumErrReply,
    BulkReply,
    IntReply,
    MultiBulkReply,
    NullBulkReply,
    OkReply,
    PongReply,
    Reply,
    StandardErrReply,
    StatusReply,
    UnknownErrReply,
)
from tinyredis.syncdict import SyncDict
from tinyredis.wildcard import compile_pattern


class Connection(Protocol):
    """A client as the database sees it."""

    db_index: int

    def write(self, data: bytes) -> None:
        """Send bytes to the client."""


@dataclass
class DataEntity:
    """A value stored under a key."""

    data: Any


ExecFunc = Callable[["DB", Sequence[bytes]], Reply]


@dataclass(frozen=True)
class _Command:
    executor: ExecFunc
    arity: int


_COMMANDS: dict[str, _Command] = {}


def register_command(name: str, executor: ExecFunc, arity: int) -> None:
    """Add a command; a negative arity means at least ``-arity`` words."""
    _COMMANDS[name.lower()] = _Command(executor, arity)


def validate_arity(arity: int, args: Sequence[bytes]) -> bool:
    """Check the number of words in a command line, the name included."""
    if arity >= 0:
        return len(args) == arity
    return len(args) >= -arity


def _key(raw: bytes) -> str:
    return bytes(raw).decode("utf-8", "surrogateescape")


def _raw(key: str) -> bytes:
    return key.encode("utf-8", "surrogateescape")


class DB:
    """One numbered keyspace."""

    def __init__(self, index: int = 0) -> None:
        self.index = index
        self._data = SyncDict()

    def exec(self, client: Connection, cmd_line: Sequence[bytes]) -> Reply:
        """Run a command line such as ``[b"SET", b"k", b"v"]``."""
        name = bytes(cmd_line[0]).decode("utf-8", "replace").lower()
        command = _COMMANDS.get(name)
        if command is None:
            return StandardErrReply("Err unknown command " + name)
        if not validate_arity(command.arity, cmd_line):
            return ArgNumErrReply(name)
        return command.executor(self, list(cmd_line[1:]))

    def get_entity(self, key: str) -> DataEntity | None:
        """The entity under the key, or None."""
        value, found = self._data.get(key)
        return value if found else None

    def put_entity(self, key: str, entity: DataEntity) -> int:
        """Store the entity; return 1 if the key is new."""
        return self._data.put(key, entity)

    def put_if_exists(self, key: str, entity: DataEntity) -> int:
        """Replace an existing entity; return 1 if replaced."""
        return self._data.put_if_exists(key, entity)

    def put_if_absent(self, key: str, entity: DataEntity) -> int:
        """Store only under a new key; return 1 if stored."""
        return self._data.put_if_absent(key, entity)

    def remove(self, key: str) -> None:
        """Delete the key."""
        self._data.remove(key)

    def removes(self, *args: str) -> int:
        """Delete the keys; return how many were present."""
        return sum(self._data.remove(key) for key in args)

    def flush(self) -> None:
        """Delete every key."""
        self._data.clear()


def ping(db: DB, args: Sequence[bytes]) -> Reply:
    """PING"""
    return PongReply()


def _exec_del(db: DB, args: Sequence[bytes]) -> Reply:
    return IntReply(db.removes(*(_key(a) for a in args)))


def _exec_exists(db: DB, args: Sequence[bytes]) -> Reply:
    return IntReply(sum(1 for a in args if db.get_entity(_key(a)) is not None))


def _exec_flushdb(db: DB, args: Sequence[bytes]) -> Reply:
    db.flush()
    return OkReply()


def _exec_type(db: DB, args: Sequence[bytes]) -> Reply:
    entity = db.get_entity(_key(args[0]))
    if entity is None:
        return StatusReply("none")
    if isinstance(entity.data, (bytes, bytearray)):
        return StatusReply("string")
    return UnknownErrReply()


def _exec_keys(db: DB, args: Sequence[bytes]) -> Reply:
    pattern = compile_pattern(_key(args[0]))
    matched = [_raw(key) for key in db._data.keys() if pattern.is_match(_raw(key))]
    return MultiBulkReply(matched)


def _exec_rename(db: DB, args: Sequence[bytes]) -> Reply:
    src, dest = _key(args[0]), _key(args[1])
    entity = db.get_entity(src)
    if entity is None:
        return StandardErrReply("No such entity")
    db.put_entity(dest, entity)
    db.remove(src)
    return OkReply()


def _exec_renamenx(db: DB, args: Sequence[bytes]) -> Reply:
    src, dest = _key(args[0]), _key(args[1])
    if db.get_entity(dest) is not None:
        return IntReply(0)
    entity = db.get_entity(src)
    if entity is None:
        return StandardErrReply("No such entity")
    db.put_entity(dest, entity)
    db.remove(src)
    return IntReply(1)


def _exec_get(db: DB, args: Sequence[bytes]) -> Reply:
    entity = db.get_entity(_key(args[0]))
    if entity is None:
        return NullBulkReply()
    return BulkReply(entity.data)


def _exec_set(db: DB, args: Sequence[bytes]) -> Reply:
    db.put_entity(_key(args[0]), DataEntity(bytes(args[1])))
    return OkReply()


def _exec_setnx(db: DB, args: Sequence[bytes]) -> Reply:
    return IntReply(db.put_if_absent(_key(args[0]), DataEntity(bytes(args[1]))))


def _exec_getset(db: DB, args: Sequence[bytes]) -> Reply:
    key = _key(args[0])
    old = db.get_entity(key)
    db.put_entity(key, DataEntity(bytes(args[1])))
    if old is None:
        return NullBulkReply()
    return BulkReply(old.data)


def _exec_strlen(db: DB, args: Sequence[bytes]) -> Reply:
    entity = db.get_entity(_key(args[0]))
    if entity is None:
        return NullBulkReply()
    return IntReply(len(entity.data))


register_command("ping", ping, 1)
register_command("DEL", _exec_del, -2)
register_command("EXISTS", _exec_exists, -2)
register_command("FLUSHDB", _exec_flushdb, -1)
register_command("TYPE", _exec_type, 2)
register_command("RENAME", _exec_rename, 3)
register_command("RENAMENX", _exec_renamenx, 3)
register_command("KEYS", _exec_keys, 2)
register_command("Get", _exec_get, 2)
register_command("Set", _exec_set, 3)
register_command("Setnx", _exec_setnx, 3)
register_command("GetSet", _exec_getset, 3)
register_command("StrLen", _exec_strlen, 2)
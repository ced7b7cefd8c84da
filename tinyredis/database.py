"""The set of numbered keyspaces a server holds, plus an echo stand-in."""

from __future__ import annotations

import re
from typing import Sequence

from tinyredis import config, logger
from tinyredis.db import DB, Connection
from tinyredis.reply import ArgNumErrReply, MultiBulkReply, OkReply, Reply, StandardErrReply

_ATOI_RE = re.compile(r"[+-]?[0-9]+")


class Database:
    """All keyspaces; routes each command to the client's selected one."""

    def __init__(self) -> None:
        if config.properties.databases == 0:
            config.properties.databases = 16
        self._dbs = [DB(i) for i in range(config.properties.databases)]

    def exec(self, client: Connection, args: Sequence[bytes]) -> Reply | None:
        """Run a command line; return None if it failed unexpectedly."""
        try:
            name = bytes(args[0]).decode("utf-8", "replace").lower()
            if name == "select":
                if len(args) != 2:
                    return ArgNumErrReply("select")
                return self._select(client, args[1])
            return self._dbs[client.db_index].exec(client, args)
        except Exception as exc:  # noqa: BLE001 - a bad command must not kill the client
            logger.error(exc)
            return None

    def _select(self, client: Connection, raw_index: bytes) -> Reply:
        text = bytes(raw_index).decode("utf-8", "replace")
        if not _ATOI_RE.fullmatch(text):
            return StandardErrReply("Err invalid DB index")
        index = int(text)
        if not 0 <= index < len(self._dbs):
            return StandardErrReply("Err DB index is out of range")
        client.db_index = index
        return OkReply()

    def close(self) -> None:
        """Drop the data held by every keyspace."""
        for db in self._dbs:
            db.flush()

    def after_client_close(self, client: Connection) -> None:
        """Reset the closed client's keyspace selection."""
        client.db_index = 0


class EchoDatabase:
    """Answers every command line with the command line itself."""

    def __init__(self) -> None:
        self.closed = False

    def exec(self, client: Connection, args: Sequence[bytes]) -> Reply:
        """Echo the arguments back as an array."""
        return MultiBulkReply(list(args))

    def close(self) -> None:
        """Mark the echo store as closed."""
        self.closed = True

    def after_client_close(self, client: Connection) -> None:
        """Reset the closed client's keyspace selection."""
        client.db_index = 0
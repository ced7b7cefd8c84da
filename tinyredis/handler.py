"""Serves RESP clients against a database."""

from __future__ import annotations

import socket
import threading
from contextlib import suppress

from tinyredis import logger
from tinyredis.connection import Connection
from tinyredis.database import Database
from tinyredis.parser import parse_stream
from tinyredis.reply import MultiBulkReply, StandardErrReply

_UNKNOWN_ERR = b"-ERR Unknown\r\n"


class RespHandler:
    """Reads commands from each client, runs them and writes the replies."""

    def __init__(self, db=None) -> None:
        self._db = db if db is not None else Database()
        self._active: set[Connection] = set()
        self._lock = threading.Lock()
        self._closing = threading.Event()

    def _close_client(self, client: Connection) -> None:
        client.close()
        self._db.after_client_close(client)
        with self._lock:
            self._active.discard(client)

    def handle(self, conn: socket.socket) -> None:
        """Serve one client until it disconnects or the handler closes."""
        if self._closing.is_set():
            conn.close()
            return
        client = Connection(conn)
        with self._lock:
            self._active.add(client)
        try:
            with conn.makefile("rb") as reader:
                self._serve(client, reader)
        finally:
            self._close_client(client)

    def _serve(self, client: Connection, reader) -> None:
        for payload in parse_stream(reader):
            if payload.err is not None:
                if isinstance(payload.err, (EOFError, OSError)):
                    logger.info(f"Connection closed: {client.remote_addr}")
                    return
                try:
                    client.write(StandardErrReply(str(payload.err)).to_bytes())
                except OSError:
                    logger.error(f"Connection closed: {client.remote_addr}")
                    return
                continue
            if payload.data is None:
                continue
            if not isinstance(payload.data, MultiBulkReply):
                logger.info("Require multi bulk reply")
                continue
            result = self._db.exec(client, payload.data.args)
            data = result.to_bytes() if result is not None else _UNKNOWN_ERR
            with suppress(OSError):
                client.write(data)

    def close(self) -> None:
        """Refuse new clients, disconnect the current ones and close the DB."""
        logger.info("Handler shutting down.")
        self._closing.set()
        with self._lock:
            clients = list(self._active)
        for client in clients:
            client.close()
        self._db.close()
"""TCP accept loop, signal-driven shutdown and a line echo handler."""

from __future__ import annotations

import signal
import socket
import threading
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Protocol

from tinyredis import logger
from tinyredis.connection import Wait

_POLL_INTERVAL = 0.1
_CLOSE_TIMEOUT = 10.0
_SHUTDOWN_SIGNALS = ("SIGHUP", "SIGQUIT", "SIGTERM", "SIGINT")


class _Handler(Protocol):
    def handle(self, conn: socket.socket) -> None: ...

    def close(self) -> None: ...


def _close_socket(sock: socket.socket) -> None:
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass
    sock.close()


@dataclass
class Config:
    """Where the server listens, as ``host:port``."""

    address: str


def listen_and_serve(
    listener: socket.socket, handler: _Handler, close_event: threading.Event
) -> None:
    """Accept clients until ``close_event`` is set or accepting fails."""
    listener.settimeout(_POLL_INTERVAL)
    workers: list[threading.Thread] = []
    try:
        while not close_event.is_set():
            try:
                conn, _ = listener.accept()
            except TimeoutError:
                continue
            except OSError:
                break
            conn.settimeout(None)
            logger.info("Accepted link")
            worker = threading.Thread(target=handler.handle, args=(conn,), daemon=True)
            worker.start()
            workers = [w for w in workers if w.is_alive()]
            workers.append(worker)
    finally:
        if close_event.is_set():
            logger.info("Shutting down")
        listener.close()
        handler.close()
    for worker in workers:
        worker.join()


def listen_and_serve_with_signal(config: Config, handler: _Handler) -> None:
    """Listen on the configured address and serve until a stop signal."""
    host, sep, port_text = config.address.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {config.address}")
    port = int(port_text)
    listener = socket.create_server((host, port))
    logger.info("Start listen")

    close_event = threading.Event()
    previous = {}
    if threading.current_thread() is threading.main_thread():
        for name in _SHUTDOWN_SIGNALS:
            signum = getattr(signal, name, None)
            if signum is not None:
                previous[signum] = signal.signal(signum, lambda *_: close_event.set())
    try:
        listen_and_serve(listener, handler, close_event)
    finally:
        for signum, old in previous.items():
            signal.signal(signum, old)


@dataclass(eq=False)
class EchoClient:
    """A client of the echo handler."""

    conn: socket.socket
    waiting: Wait = field(default_factory=Wait)

    def close(self) -> None:
        """Wait briefly for an echo in flight, then close the socket."""
        self.waiting.wait(_CLOSE_TIMEOUT)
        _close_socket(self.conn)


class EchoHandler:
    """Writes every line a client sends back to it."""

    def __init__(self) -> None:
        self._active: set[EchoClient] = set()
        self._lock = threading.Lock()
        self._closing = threading.Event()

    def handle(self, conn: socket.socket) -> None:
        """Echo lines until the client disconnects."""
        if self._closing.is_set():
            conn.close()
            return
        client = EchoClient(conn)
        with self._lock:
            self._active.add(client)
        try:
            with conn.makefile("rb") as reader:
                while True:
                    try:
                        line = reader.readline()
                    except OSError as exc:
                        logger.warn(exc)
                        return
                    if not line.endswith(b"\n"):
                        logger.info("Connection closed by client")
                        return
                    client.waiting.add(1)
                    try:
                        with suppress(OSError):
                            conn.sendall(line)
                    finally:
                        client.waiting.done()
        finally:
            with self._lock:
                self._active.discard(client)

    def close(self) -> None:
        """Refuse new clients and disconnect the current ones."""
        logger.info("Handler shutting down")
        self._closing.set()
        with self._lock:
            clients = list(self._active)
        for client in clients:
            _close_socket(client.conn)
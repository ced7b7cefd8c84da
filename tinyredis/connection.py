"""A client connection and a wait counter that can time out."""

from __future__ import annotations

import socket
import threading

_CLOSE_TIMEOUT = 10.0


class Wait:
    """A counter of pending work that can be waited on, with a timeout."""

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    def add(self, delta: int) -> None:
        """Change the counter by ``delta``, which may be negative."""
        with self._cond:
            count = self._count + delta
            if count < 0:
                raise ValueError("negative wait counter")
            self._count = count
            if count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        """Decrement the counter by one."""
        self.add(-1)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the counter is zero; return True if the timeout ran out."""
        with self._cond:
            return not self._cond.wait_for(lambda: self._count == 0, timeout)


def _close_socket(sock: socket.socket) -> None:
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass
    sock.close()


class Connection:
    """A connected client: serialises writes and remembers its selected DB."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._waiting = Wait()
        self._lock = threading.Lock()
        self.db_index = 0
        try:
            self.remote_addr = sock.getpeername()
        except OSError:
            self.remote_addr = None

    def close(self) -> None:
        """Wait briefly for writes in flight, then close the socket."""
        self._waiting.wait(_CLOSE_TIMEOUT)
        _close_socket(self._sock)

    def write(self, data: bytes) -> None:
        """Send all of ``data``; an empty write sends nothing."""
        if not data:
            return
        with self._lock:
            self._waiting.add(1)
            try:
                self._sock.sendall(data)
            finally:
                self._waiting.done()
import signal
import socket
import threading
import time

import pytest

from tinyredis.handler import RespHandler
from tinyredis.server import (
    Config,
    EchoClient,
    EchoHandler,
    listen_and_serve,
    listen_and_serve_with_signal,
)


def _serve(handler, sock):
    worker = threading.Thread(target=handler.handle, args=(sock,), daemon=True)
    worker.start()
    return worker


def _recv_exact(sock, n):
    buf = b""
    while len(buf) < n:
        chunk = sock.recv(n - len(buf))
        if not chunk:
            break
        buf += chunk
    return buf


class _RecordingHandler:
    def __init__(self):
        self.closed = False
        self.handled = []

    def handle(self, conn):
        self.handled.append(conn)
        conn.close()

    def close(self):
        self.closed = True


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    b.settimeout(5)
    yield a, b
    a.close()
    b.close()


def test_echo_handler_echoes_lines(pair):
    server, client = pair
    handler = EchoHandler()
    worker = _serve(handler, server)
    client.sendall(b"hello\n")
    assert _recv_exact(client, 6) == b"hello\n"
    client.sendall(b"one\ntwo\n")
    assert _recv_exact(client, 8) == b"one\ntwo\n"
    client.shutdown(socket.SHUT_WR)
    worker.join(5)
    assert not worker.is_alive()


def test_echo_handler_close_ends_clients(pair):
    server, client = pair
    handler = EchoHandler()
    worker = _serve(handler, server)
    client.sendall(b"ping\n")
    assert _recv_exact(client, 5) == b"ping\n"
    handler.close()
    worker.join(5)
    assert not worker.is_alive()
    assert client.recv(1) == b""


def test_echo_handler_after_close_drops_connection(pair):
    server, client = pair
    handler = EchoHandler()
    handler.close()
    result = handler.handle(server)
    assert result is None
    assert client.recv(1) == b""


def test_echo_handler_does_not_echo_partial_line(pair):
    server, client = pair
    worker = _serve(EchoHandler(), server)
    client.sendall(b"abc")
    client.shutdown(socket.SHUT_WR)
    worker.join(5)
    assert not worker.is_alive()
    server.close()
    assert client.recv(16) == b""


def test_echo_client_close_closes_socket(pair):
    server, client = pair
    echo_client = EchoClient(server)
    echo_client.close()
    assert client.recv(1) == b""
    assert server.fileno() == -1


def test_listen_and_serve_runs_commands_until_closed():
    listener = socket.create_server(("127.0.0.1", 0))
    address = listener.getsockname()
    close_event = threading.Event()
    worker = threading.Thread(
        target=listen_and_serve, args=(listener, RespHandler(), close_event), daemon=True
    )
    worker.start()
    with socket.create_connection(address, timeout=5) as client:
        client.sendall(b"*1\r\n$4\r\nPING\r\n")
        assert _recv_exact(client, 7) == b"+PONG\r\n"
        close_event.set()
        worker.join(5)
        assert not worker.is_alive()
        assert client.recv(1) == b""


def test_listen_and_serve_closes_listener_and_handler():
    listener = socket.create_server(("127.0.0.1", 0))
    handler = _RecordingHandler()
    close_event = threading.Event()
    close_event.set()
    listen_and_serve(listener, handler, close_event)
    assert handler.closed is True
    assert listener.fileno() == -1


def test_address_without_port_is_rejected():
    with pytest.raises(ValueError):
        listen_and_serve_with_signal(Config("localhost"), _RecordingHandler())


def test_occupied_port_raises():
    with socket.create_server(("127.0.0.1", 0)) as taken:
        port = taken.getsockname()[1]
        handler = _RecordingHandler()
        with pytest.raises(OSError):
            listen_and_serve_with_signal(Config(f"127.0.0.1:{port}"), handler)
        assert handler.closed is False


def test_stop_signal_shuts_the_server_down():
    original = signal.getsignal(signal.SIGTERM)

    def fire():
        deadline = time.monotonic() + 5
        while signal.getsignal(signal.SIGTERM) is original:
            if time.monotonic() > deadline:
                return
            time.sleep(0.01)
        signal.raise_signal(signal.SIGTERM)

    handler = _RecordingHandler()
    firer = threading.Thread(target=fire, daemon=True)
    firer.start()
    listen_and_serve_with_signal(Config("127.0.0.1:0"), handler)
    firer.join(5)
    assert handler.closed is True
    assert signal.getsignal(signal.SIGTERM) is original
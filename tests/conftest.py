import socket
import ssl
import threading
from pathlib import Path
from queue import Queue
from typing import Callable

import pytest

CERT_DIR = Path(__file__).parent / "data"

Handler = Callable[[ssl.SSLSocket, bytes], None]


def respond_with(payload: bytes) -> Handler:
    def handler(tls_sock: ssl.SSLSocket, request: bytes) -> None:
        tls_sock.sendall(payload)
    return handler


def _read_line(sock: ssl.SSLSocket) -> bytes:
    data = b""
    while not data.endswith(b"\n") and len(data) < 2048:
        chunk = sock.recv(1024)
        if not chunk:
            break
        data += chunk
    return data


class GeminiServerFixture:
    """Accepts TLS connections until stopped.

    Connections that fail the handshake, or close without sending a request
    line (the certificate probe does this), are skipped. Every request line
    received is put on ``requests`` before ``handler`` answers it.
    """

    def __init__(self, handler: Handler, cert_name: str = "localhost"):
        self._handler = handler
        self._context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        self._context.load_cert_chain(CERT_DIR / f"{cert_name}.crt", CERT_DIR / f"{cert_name}.key")
        self._should_stop = threading.Event()
        self.requests: Queue = Queue()
        self.connections = 0
        self.listener_sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.listener_sock.bind(("127.0.0.1", 0))
        self.listener_sock.listen()
        self.listener_sock.settimeout(0.05)
        self.host = "localhost"
        self.port = self.listener_sock.getsockname()[1]
        self.thread = threading.Thread(target=self._accept_loop, daemon=True)

    def start(self):
        self.thread.start()

    def stop(self):
        self._should_stop.set()
        self.thread.join(timeout=2.0)
        self.listener_sock.close()

    def open_socket(self) -> socket.socket:
        return socket.create_connection(("127.0.0.1", self.port), timeout=2.0)

    def _accept_loop(self):
        while not self._should_stop.is_set():
            try:
                client_sock, _ = self.listener_sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return

            self.connections += 1
            with client_sock:
                client_sock.settimeout(2.0)
                try:
                    with self._context.wrap_socket(client_sock, server_side=True) as tls_sock:
                        request = _read_line(tls_sock)
                        if not request:
                            continue
                        self.requests.put(request)
                        self._handler(tls_sock, request)
                except OSError:
                    continue


@pytest.fixture
def gemini_server():
    servers = []

    def _start(handler: Handler, cert_name: str = "localhost") -> GeminiServerFixture:
        server = GeminiServerFixture(handler, cert_name)
        server.start()
        servers.append(server)
        return server

    yield _start

    for server in servers:
        server.stop()


class FakeTransport:
    """Serves canned response chunks and records everything written."""

    def __init__(self, chunks: list[bytes] | None = None):
        self.chunks = list(chunks or [])
        self.sent = bytearray()
        self.reads = 0
        self.connected_to: tuple[str, int] | None = None
        self.closed = False

    @property
    def connected(self) -> bool:
        return self.connected_to is not None and not self.closed

    def connect(self, host: str, port: int) -> None:
        self.connected_to = (host, port)

    def send_all(self, data: bytes) -> None:
        self.sent += data

    def read_into(self, buffer: memoryview) -> int:
        self.reads += 1
        if not self.chunks:
            return 0
        chunk = self.chunks.pop(0)
        buffer[:len(chunk)] = chunk
        return len(chunk)

    def close(self) -> None:
        self.closed = True

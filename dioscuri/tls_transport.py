import socket
import ssl

from .errors import (
    TransportError,
    DnsFailureError,
    SocketConnectError,
    TlsHandshakeError,
    SocketWriteError,
    SocketReadError,
)
from .transport import Transport
from .verification import AllowUnknownIssuerVerifier, ServerVerifier


class TlsTransport(Transport):
    def __init__(
        self,
        verifier: ServerVerifier | None = None,
        connect_timeout: float | None = None,
        read_timeout: float | None = None,
    ) -> None:
        self._verifier = verifier if verifier is not None else AllowUnknownIssuerVerifier()
        self._connect_timeout = connect_timeout
        self._read_timeout = read_timeout
        self._sock: ssl.SSLSocket | None = None

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def connect(self, host: str, port: int) -> None:
        if self._sock is not None:
            raise TransportError("Transport is already connected.")

        def open_socket() -> socket.socket:
            try:
                sock = socket.create_connection((host, port), timeout=self._connect_timeout)
            except socket.gaierror as e:
                raise DnsFailureError(f"DNS Failure for host '{host}'") from e
            except OSError as e:
                raise SocketConnectError(f"Socket connection failed: {e}") from e
            except UnicodeError as e:
                # The resolver rejects names it cannot IDNA-encode before any lookup.
                raise DnsFailureError(f"DNS Failure for host '{host}': {e}") from e
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            return sock

        try:
            sock = self._verifier.establish(open_socket, host)
        except ssl.SSLError as e:
            raise TlsHandshakeError(f"TLS handshake with '{host}' failed: {e}") from e
        except OSError as e:
            raise TlsHandshakeError(f"TLS handshake with '{host}' was interrupted: {e}") from e

        sock.settimeout(self._read_timeout)
        self._sock = sock

    def send_all(self, data: bytes) -> None:
        if self._sock is None:
            raise TransportError("Cannot write on a disconnected transport.")

        try:
            self._sock.sendall(data)
        except OSError as e:
            raise SocketWriteError(f"Socket write failed: {e}") from e

    def read_into(self, buffer: memoryview) -> int:
        if self._sock is None:
            raise TransportError("Cannot read from a disconnected transport.")

        try:
            return self._sock.recv_into(buffer)
        except OSError as e:
            raise SocketReadError(f"Socket read failed: {e}") from e

    def close(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None

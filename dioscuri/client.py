from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger

from .config import DEFAULT_PORT, Settings
from .errors import (
    GeminiError,
    UnsupportedStatusError,
    UnsupportedMimeError,
    BodyEncodingError,
    RequestFailedError,
)
from .gemini_protocol import (
    Address,
    GeminiProtocol,
    GeminiResponse,
    ResponseHeader,
    StatusClass,
)
from .gemini_wire import GeminiWireProtocol
from .tls_transport import TlsTransport
from .transport import Transport
from .verification import AllowUnknownIssuerVerifier

UNSUPPORTED_STATUS_CLASSES = (
    StatusClass.INPUT,
    StatusClass.REDIRECT,
    StatusClass.CLIENT_CERTIFICATE_REQUIRED,
)


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(component="client", event=event, **kwargs).info("")


@dataclass
class GeminiConnection:
    address: Address
    protocol: GeminiProtocol


class GeminiClient:
    """Performs one Gemini request per call, each over a fresh connection.

    The client holds at most one connection. It is dropped at the start of
    every request, before anything can fail, so a connection is never
    reused; a request that fails leaves no connection behind.
    """

    def __init__(
        self,
        transport_factory: Callable[[], Transport] | None = None,
        default_port: int = DEFAULT_PORT,
    ):
        if transport_factory is None:
            verifier = AllowUnknownIssuerVerifier()
            transport_factory = lambda: TlsTransport(verifier)
        self._transport_factory = transport_factory
        self._default_port = default_port
        self._connection: GeminiConnection | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        verifier = AllowUnknownIssuerVerifier()
        return cls(
            transport_factory=lambda: TlsTransport(
                verifier,
                connect_timeout=settings.connect_timeout_seconds,
                read_timeout=settings.read_timeout_seconds,
            ),
            default_port=settings.default_port,
        )

    @property
    def connection(self) -> GeminiConnection | None:
        return self._connection

    def request(self, raw_url: str) -> str:
        return self.fetch(raw_url).body

    def fetch(self, raw_url: str) -> GeminiResponse:
        self._drop_connection()

        try:
            address = Address.parse(raw_url)
            connection = self._open_connection(address)
            response = self._exchange(connection)
        except GeminiError as e:
            _log("request_failed", url=raw_url, error=type(e).__name__, detail=str(e))
            self._drop_connection()
            raise

        _log("request_succeeded", url=response.address.url, status=response.header.status, mime=response.header.mime_type)
        return response

    def close(self) -> None:
        self._drop_connection()

    def __enter__(self) -> "GeminiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _open_connection(self, address: Address) -> GeminiConnection:
        port = address.port if address.port is not None else self._default_port
        protocol = GeminiWireProtocol(self._transport_factory())
        _log("connecting", host=address.host, port=port)
        protocol.connect(address.host, port)
        self._connection = GeminiConnection(address=address, protocol=protocol)
        return self._connection

    def _exchange(self, connection: GeminiConnection) -> GeminiResponse:
        protocol = connection.protocol
        protocol.send_request(connection.address)
        header = protocol.read_header()

        status_class = header.status_class
        if status_class in UNSUPPORTED_STATUS_CLASSES:
            raise UnsupportedStatusError(header.status)

        if status_class is StatusClass.SUCCESS:
            return GeminiResponse(
                address=connection.address,
                header=header,
                body=self._read_text_body(protocol, header),
            )

        raise RequestFailedError(header.status, header.meta)

    def _read_text_body(self, protocol: GeminiProtocol, header: ResponseHeader) -> str:
        mime_type = header.mime_type
        if not mime_type.startswith("text/"):
            raise UnsupportedMimeError(mime_type)

        body = protocol.read_body()
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BodyEncodingError(str(e)) from e

    def _drop_connection(self) -> None:
        connection, self._connection = self._connection, None
        if connection is not None:
            connection.protocol.disconnect()

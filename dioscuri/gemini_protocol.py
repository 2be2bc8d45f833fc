import ipaddress
from dataclasses import dataclass
from enum import Enum
from typing import Protocol
from urllib.parse import urlsplit

from .errors import InvalidAddressError

GEMINI_SCHEME = "gemini"
GEMINI_PREFIX = f"{GEMINI_SCHEME}://"


@dataclass(frozen=True)
class Address:
    host: str
    path: str = "/"
    port: int | None = None
    query: str = ""
    scheme: str = GEMINI_SCHEME

    @classmethod
    def parse(cls, raw_url: str) -> "Address":
        raw_url = raw_url.strip()
        try:
            parts = urlsplit(raw_url)
            port = parts.port
        except ValueError as e:
            raise InvalidAddressError(f"Url could not be parsed: {e}") from e

        if not parts.scheme:
            raise InvalidAddressError(f"Url could not be parsed: '{raw_url}' has no scheme")
        if parts.scheme != GEMINI_SCHEME:
            raise InvalidAddressError(f"Scheme '{parts.scheme}' is not supported")
        if not parts.hostname:
            raise InvalidAddressError("URL does not contain a host")
        if not _is_valid_host(parts.hostname):
            raise InvalidAddressError(f"The host provided is invalid: '{parts.hostname}'")

        return cls(
            host=parts.hostname,
            path=parts.path or "/",
            port=port,
            query=parts.query,
        )

    @property
    def authority(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port is None:
            return host
        return f"{host}:{self.port}"

    @property
    def url(self) -> str:
        query = f"?{self.query}" if self.query else ""
        return f"{self.scheme}://{self.authority}{self.path}{query}"


def _is_valid_host(host: str) -> bool:
    """An IP address, or a name whose labels are 1 to 63 characters once IDNA-encoded."""
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass

    try:
        host.encode("idna")
    except UnicodeError:
        return False
    return True


class StatusClass(Enum):
    INPUT = 1
    SUCCESS = 2
    REDIRECT = 3
    TEMPORARY_FAILURE = 4
    PERMANENT_FAILURE = 5
    CLIENT_CERTIFICATE_REQUIRED = 6


@dataclass
class ResponseHeader:
    status: str
    status_digit: int
    meta: str

    @property
    def status_class(self) -> StatusClass | None:
        try:
            return StatusClass(self.status_digit)
        except ValueError:
            return None

    @property
    def mime_type(self) -> str:
        return self.meta.strip()


@dataclass
class GeminiResponse:
    address: Address
    header: ResponseHeader
    body: str


class GeminiProtocol(Protocol):
    def connect(self, host: str, port: int) -> None:
        ...

    def disconnect(self) -> None:
        ...

    def send_request(self, address: Address) -> None:
        ...

    def read_header(self) -> ResponseHeader:
        ...

    def read_body(self) -> bytes:
        ...

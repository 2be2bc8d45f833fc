from .transport import Transport
from .gemini_protocol import GEMINI_PREFIX, Address, GeminiProtocol, ResponseHeader
from .errors import MalformedResponseError

# <STATUS><SPACE><META><CR><LF> with META capped at 1024 bytes.
MAX_HEADER_SIZE = 2 + 1 + 1024 + 2


def build_request_line(address: Address) -> bytes:
    query = f"?{address.query}" if address.query else ""
    request_line = f"{GEMINI_PREFIX}{address.authority}{address.path}{query}\r\n"
    return request_line.encode("utf-8")


def parse_header(line: bytes) -> ResponseHeader:
    """Split a raw header line at its first space into status and meta."""
    first_space = line.find(b" ")
    if first_space == -1:
        raise MalformedResponseError("Could not find space between status and meta.")

    try:
        status = line[:first_space].decode("ascii")
        meta = line[first_space + 1:].decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedResponseError(f"Response header is not valid UTF-8: {e}") from e

    status_digit = status[:1]
    if status_digit not in tuple("123456789"):
        raise MalformedResponseError(f"Invalid status code '{status}' in header.")

    return ResponseHeader(
        status=status,
        status_digit=int(status_digit),
        meta=meta.rstrip("\r\n"),
    )


class GeminiWireProtocol(GeminiProtocol):
    _LINE_TERMINATOR = b"\n"
    _READ_CHUNK_SIZE = 4096

    def __init__(self, transport: Transport):
        self._transport: Transport = transport
        self._buffer: bytearray = bytearray()

    def connect(self, host: str, port: int) -> None:
        self._transport.connect(host, port)

    def disconnect(self) -> None:
        self._transport.close()

    def send_request(self, address: Address) -> None:
        self._buffer.clear()
        self._transport.send_all(build_request_line(address))

    def read_header(self) -> ResponseHeader:
        while True:
            line_end = self._buffer.find(self._LINE_TERMINATOR)
            if line_end != -1:
                break

            if len(self._buffer) >= MAX_HEADER_SIZE:
                raise MalformedResponseError(f"Response header exceeds {MAX_HEADER_SIZE} bytes.")

            if self._read_chunk() == 0:
                raise MalformedResponseError("Connection closed before the response header was complete.")

        header_size = line_end + len(self._LINE_TERMINATOR)
        if header_size > MAX_HEADER_SIZE:
            raise MalformedResponseError(f"Response header exceeds {MAX_HEADER_SIZE} bytes.")

        header_line = bytes(self._buffer[:header_size])
        # Whatever followed the header in the same read is the start of the body.
        del self._buffer[:header_size]
        return parse_header(header_line)

    def read_body(self) -> bytes:
        while self._read_chunk() != 0:
            pass

        body = bytes(self._buffer)
        self._buffer.clear()
        return body

    def _read_chunk(self) -> int:
        old_len = len(self._buffer)
        self._buffer.extend(b'\0' * self._READ_CHUNK_SIZE)
        read_view = memoryview(self._buffer)
        bytes_read = self._transport.read_into(read_view[old_len:])
        del read_view
        del self._buffer[old_len + bytes_read:]
        return bytes_read

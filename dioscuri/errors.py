class GeminiError(Exception):
    """Base exception for the dioscuri library."""
    pass

# --- Transport Errors ---

class TransportError(GeminiError):
    """The connection to the capsule could not be used. Retryable."""
    pass

class DnsFailureError(TransportError): pass
class SocketConnectError(TransportError): pass
class TlsHandshakeError(TransportError): pass
class SocketWriteError(TransportError): pass
class SocketReadError(TransportError): pass

# --- Gemini Client Errors ---

class GeminiClientError(GeminiError):
    """The request or the response violated the protocol or our support for it."""
    pass

class InvalidAddressError(GeminiClientError): pass
class MalformedResponseError(GeminiClientError): pass


class UnsupportedStatusError(GeminiClientError):
    def __init__(self, status: str) -> None:
        super().__init__(f"Request status {status} is not supported")
        self.status = status


class UnsupportedMimeError(GeminiClientError):
    def __init__(self, mime_type: str) -> None:
        super().__init__(f"MIME type {mime_type} is not supported")
        self.mime_type = mime_type


class BodyEncodingError(GeminiClientError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"UTF-8 string could not be parsed: {reason}")


class RequestFailedError(GeminiClientError):
    def __init__(self, status: str, message: str) -> None:
        super().__init__(f"An error happened while performing the request: {message}")
        self.status = status
        self.message = message

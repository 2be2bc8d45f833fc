"""Server certificate verification for Gemini capsules.

There is no central certificate authority in Gemini space and most
capsules present self-signed certificates. ``AllowUnknownIssuerVerifier``
accepts those, and only those: it wraps the standard verifier and steps in
when the one thing wrong with the presented chain is that nobody we trust
issued it. Expired certificates, hostname mismatches and broken chains are
still rejected by the standard verifier.
"""
import socket
import ssl
from typing import Any, Callable, Protocol

from loguru import logger

SocketOpener = Callable[[], socket.socket]

# OpenSSL X509_V_ERR_* codes reporting a chain with no trusted issuer.
UNABLE_TO_GET_ISSUER_CERT = 2
DEPTH_ZERO_SELF_SIGNED_CERT = 18
SELF_SIGNED_CERT_IN_CHAIN = 19
UNABLE_TO_GET_ISSUER_CERT_LOCALLY = 20
UNABLE_TO_VERIFY_LEAF_SIGNATURE = 21

UNKNOWN_ISSUER_CODES = frozenset({
    UNABLE_TO_GET_ISSUER_CERT,
    DEPTH_ZERO_SELF_SIGNED_CERT,
    SELF_SIGNED_CERT_IN_CHAIN,
    UNABLE_TO_GET_ISSUER_CERT_LOCALLY,
    UNABLE_TO_VERIFY_LEAF_SIGNATURE,
})


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(component="verification", event=event, **kwargs).info("")


class ServerVerifier(Protocol):
    def establish(self, open_socket: SocketOpener, server_name: str) -> ssl.SSLSocket:
        """Open a socket with ``open_socket`` and return it after a verified handshake."""
        ...


class WebPkiVerifier(ServerVerifier):
    """Chain and hostname verification against the system trust store."""

    def __init__(self, context: ssl.SSLContext | None = None) -> None:
        self._context = context if context is not None else ssl.create_default_context()

    def establish(self, open_socket: SocketOpener, server_name: str) -> ssl.SSLSocket:
        return _handshake(self._context, open_socket(), server_name)

    def anchored_at(self, der_certificate: bytes) -> "WebPkiVerifier":
        """The same checks, with ``der_certificate`` accepted as a trust anchor."""
        context = ssl.create_default_context(cadata=der_certificate)
        context.verify_flags = self._context.verify_flags | ssl.VERIFY_X509_PARTIAL_CHAIN
        context.check_hostname = self._context.check_hostname
        context.verify_mode = self._context.verify_mode
        context.minimum_version = self._context.minimum_version
        return WebPkiVerifier(context)

    def presented_certificate(self, open_socket: SocketOpener, server_name: str) -> bytes | None:
        """DER certificate the server presents, fetched without verifying it."""
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        context.minimum_version = self._context.minimum_version
        with _handshake(context, open_socket(), server_name) as probe:
            return probe.getpeercert(binary_form=True)


class AllowUnknownIssuerVerifier(ServerVerifier):
    def __init__(self, inner: WebPkiVerifier | None = None) -> None:
        self._inner = inner if inner is not None else WebPkiVerifier()

    def establish(self, open_socket: SocketOpener, server_name: str) -> ssl.SSLSocket:
        try:
            return self._inner.establish(open_socket, server_name)
        except ssl.SSLCertVerificationError as e:
            if e.verify_code not in UNKNOWN_ISSUER_CODES:
                raise
            rejection = e

        presented = self._inner.presented_certificate(open_socket, server_name)
        if presented is None:
            raise rejection

        _log("unknown_issuer_relaxed", server_name=server_name, reason=rejection.verify_message)
        return self._inner.anchored_at(presented).establish(open_socket, server_name)


def _handshake(context: ssl.SSLContext, sock: socket.socket, server_name: str) -> ssl.SSLSocket:
    try:
        return context.wrap_socket(sock, server_hostname=server_name)
    except BaseException:
        sock.close()
        raise

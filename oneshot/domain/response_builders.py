"""Pure HTTP response builders and gzip negotiation."""

import gzip
import logging
import zlib

from oneshot.bootstrap.config import WIRE_ENCODING
from oneshot.domain.correlation_id import CorrelationLoggerAdapter
from oneshot.domain.http_types import HttpResponse

COMPRESSION_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("oneshot.compression"), {}
)

GZIP_TOKEN = "gzip"
GZIP_LEVEL = 9


def accepted_encodings(accept_encoding: str) -> set[str]:
    """Split an Accept-Encoding value into its whitespace-free tokens."""
    compact = "".join(accept_encoding.split())
    return set(compact.split(","))


def accepts_gzip(accept_encoding: str) -> bool:
    """Return True when the literal gzip token is advertised."""
    return GZIP_TOKEN in accepted_encodings(accept_encoding)


def _gzip(payload: bytes) -> bytes:
    return gzip.compress(payload, compresslevel=GZIP_LEVEL)


def negotiate_compression(
    payload: bytes, accept_encoding: str
) -> tuple[bytes, dict[str, str]]:
    """Compress the payload when gzip is accepted and build the text headers.

    Compression is best effort: when it fails the payload is sent as-is and
    no Content-Encoding header is set. Content-Length always describes the
    body that is finally chosen.
    """
    headers = {"Content-Type": "text/plain"}
    body = payload
    if accepts_gzip(accept_encoding):
        try:
            body = _gzip(payload)
        except (OSError, zlib.error) as error:
            COMPRESSION_LOGGER.warning(
                "Compression failed, sending identity body",
                extra={
                    "event": "compression_failed",
                    "error_type": type(error).__name__,
                },
            )
            body = payload
        else:
            headers["Content-Encoding"] = GZIP_TOKEN
            if COMPRESSION_LOGGER.logger.isEnabledFor(logging.DEBUG):
                COMPRESSION_LOGGER.debug(
                    "Compressed payload",
                    extra={
                        "event": "payload_compressed",
                        "bytes_in": len(payload),
                        "bytes_out": len(body),
                    },
                )
    headers["Content-Length"] = str(len(body))
    return body, headers


def empty_response(status: str = "200 OK") -> HttpResponse:
    """Return a response with no headers and no body."""
    return HttpResponse(status, {}, b"")


def text_response(message: str) -> HttpResponse:
    """Return an uncompressed text/plain 200 response."""
    payload = message.encode(WIRE_ENCODING)
    headers = {"Content-Type": "text/plain", "Content-Length": str(len(payload))}
    return HttpResponse("200 OK", headers, payload)


def compressed_text_response(message: str, accept_encoding: str) -> HttpResponse:
    """Return a text/plain 200 response, gzip-compressed when accepted."""
    payload = message.encode(WIRE_ENCODING)
    body, headers = negotiate_compression(payload, accept_encoding)
    return HttpResponse("200 OK", headers, body)


def octet_stream_response(payload: bytes) -> HttpResponse:
    """Return a 200 response carrying raw file bytes."""
    headers = {
        "Content-Type": "application/octet-stream",
        "Content-Length": str(len(payload)),
    }
    return HttpResponse("200 OK", headers, payload)


def created_response() -> HttpResponse:
    """Return a 201 response with no body."""
    return empty_response("201 Created")


def not_found_response() -> HttpResponse:
    """Return a 404 response with no body."""
    return empty_response("404 Not Found")


def bad_request_response() -> HttpResponse:
    """Return a 400 response with no body."""
    return empty_response("400 Bad Request")


def method_not_allowed_response(allowed_methods) -> HttpResponse:
    """Produce a 405 response enumerating the supported HTTP methods."""
    allow_header = ", ".join(sorted(allowed_methods))
    return HttpResponse("405 Method Not Allowed", {"Allow": allow_header}, b"")

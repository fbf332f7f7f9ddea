"""HTTP Input/Output operations."""

import logging
import socket
from typing import Optional

from oneshot.bootstrap.config import READ_BUFFER_BYTES, WIRE_ENCODING
from oneshot.domain.correlation_id import CorrelationLoggerAdapter
from oneshot.domain.http_types import HttpResponse

IO_LOGGER = CorrelationLoggerAdapter(logging.getLogger("oneshot.io"), {})

HTTP_VERSION = "HTTP/1.1"
CRLF = "\r\n"


def read_request(client_socket: socket.socket) -> bytes:
    """Perform the single bounded read that makes up a request."""
    raw = client_socket.recv(READ_BUFFER_BYTES)
    if IO_LOGGER.logger.isEnabledFor(logging.DEBUG):
        IO_LOGGER.debug(
            "Read request bytes", extra={"event": "request_read", "bytes_in": len(raw)}
        )
    return raw


def serialize_response(
    status: str, headers: Optional[dict[str, str]], body: bytes
) -> bytes:
    """Render the status line, headers and body exactly as they go on the wire.

    No header is added here: callers set Content-Length and Content-Type
    themselves.
    """
    head = f"{HTTP_VERSION} {status}{CRLF}"
    for name, value in (headers or {}).items():
        head += f"{name}: {value}{CRLF}"
    head += CRLF
    return head.encode(WIRE_ENCODING) + body


def send_response(client_socket: socket.socket, response: HttpResponse) -> int:
    """Serialize and send the response with a single write."""
    payload = serialize_response(response.status, response.headers, response.body)
    client_socket.sendall(payload)
    IO_LOGGER.debug(
        "Sent response",
        extra={
            "event": "response_sent",
            "status": response.status,
            "bytes_out": len(payload),
        },
    )
    return len(payload)

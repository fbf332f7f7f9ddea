"""Listening socket creation."""

import logging
import socket
import sys

from oneshot.bootstrap.config import ACCEPT_POLL_SECONDS
from oneshot.domain.correlation_id import CorrelationLoggerAdapter

SOCKET_LOGGER = CorrelationLoggerAdapter(logging.getLogger("oneshot.socket"), {})


def create_server_socket(host: str, port: int) -> socket.socket:
    """Bind the listening socket, exiting the process when the port is unavailable."""
    try:
        server_socket = socket.create_server((host, port))
    except OSError as error:
        SOCKET_LOGGER.critical(
            "Failed to bind listening socket",
            extra={
                "event": "bind_failed",
                "host": host,
                "port": port,
                "error_type": type(error).__name__,
            },
        )
        sys.exit(1)
    server_socket.settimeout(ACCEPT_POLL_SECONDS)
    return server_socket

"""Worker thread logic for handling individual client connections."""

import logging
import socket
import threading
import time

from oneshot.domain.correlation_id import (
    CorrelationLoggerAdapter,
    clear_correlation_id,
    generate_correlation_id,
    set_correlation_id,
)
from oneshot.pipeline.io import read_request, send_response
from oneshot.pipeline.parser import build_request
from oneshot.pipeline.router import route_request
from oneshot.transport.context import WorkerContext

WORKER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("oneshot.transport.worker"), {}
)


def _close_socket(client_socket: socket.socket, client_addr_str: str) -> None:
    try:
        client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        pass
    client_socket.close()
    WORKER_LOGGER.debug(
        "Socket closed",
        extra={"event": "socket_closed", "client": client_addr_str},
    )


def _serve_once(
    client_socket: socket.socket, client_addr_str: str, context: WorkerContext
) -> None:
    """Read, parse, dispatch and write exactly once."""
    started = time.perf_counter()
    raw = read_request(client_socket)
    if not raw:
        if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            WORKER_LOGGER.debug(
                "Client disconnected before sending a request",
                extra={"event": "client_disconnected", "client": client_addr_str},
            )
        return

    request = build_request(raw)
    WORKER_LOGGER.debug(
        "Request line parsed",
        extra={
            "event": "request_line_parsed",
            "method": request.method,
            "route": request.path,
        },
    )

    response = route_request(request, context)
    bytes_out = send_response(client_socket, response)
    WORKER_LOGGER.info(
        "Request complete",
        extra={
            "event": "request_complete",
            "client": client_addr_str,
            "method": request.method,
            "route": request.path,
            "status_code": response.status_code,
            "bytes_in": len(raw),
            "bytes_out": bytes_out,
            "duration_ms": round((time.perf_counter() - started) * 1000, 3),
        },
    )


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    """Serve the single request carried by a client connection, then close it."""
    client_addr_str = f"{client_address[0]}:{client_address[1]}"
    current_thread = threading.current_thread()
    lifecycle = context.lifecycle
    if lifecycle is not None:
        lifecycle.register_worker(current_thread)

    set_correlation_id(generate_correlation_id())
    WORKER_LOGGER.debug(
        "Request processing started",
        extra={"event": "request_started", "client": client_addr_str},
    )

    try:
        _serve_once(client_socket, client_addr_str, context)
    except OSError as error:
        WORKER_LOGGER.error(
            "Error handling client connection",
            extra={
                "event": "connection_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )
    except Exception as error:  # pylint: disable=broad-except
        WORKER_LOGGER.error(
            "Unexpected error in worker",
            extra={
                "event": "worker_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
            exc_info=True,
        )
    finally:
        _close_socket(client_socket, client_addr_str)
        if lifecycle is not None:
            lifecycle.cleanup_worker(current_thread)
        clear_correlation_id()

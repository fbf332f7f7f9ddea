"""Main connection acceptance loop."""

import argparse
import logging
import socket
import sys
import threading

from oneshot.bootstrap.socket_factory import create_server_socket
from oneshot.domain.correlation_id import CorrelationLoggerAdapter
from oneshot.lifecycle.state import ServerLifecycle
from oneshot.transport.context import WorkerContext
from oneshot.transport.worker import handle_client

ACCEPT_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("oneshot.transport.accept"), {}
)


def _spawn_worker(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> threading.Thread:
    """Start one thread for the accepted connection."""
    if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ACCEPT_LOGGER.debug(
            "Client connection accepted",
            extra={
                "event": "client_accepted",
                "client": f"{client_address[0]}:{client_address[1]}",
            },
        )
    thread = threading.Thread(
        target=handle_client,
        args=(client_socket, client_address, context),
        daemon=False,
    )
    thread.start()
    return thread


def run_server(args: argparse.Namespace, lifecycle: ServerLifecycle) -> None:
    """Accept connections until stopped, one worker thread per connection.

    A failed accept is fatal to the whole process, exactly like a failed bind.
    """
    server_socket = create_server_socket(args.host, args.port)
    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={
            "event": "server_listening",
            "host": args.host,
            "port": args.port,
            "directory": args.directory,
        },
    )
    context = WorkerContext(directory=args.directory, lifecycle=lifecycle)

    try:
        while not lifecycle.should_stop():
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                continue
            except OSError as error:
                if lifecycle.should_stop():
                    break
                ACCEPT_LOGGER.error(
                    "Socket accept failed",
                    extra={"event": "accept_error", "error_type": type(error).__name__},
                )
                sys.exit(1)

            _spawn_worker(client_socket, client_address, context)
    finally:
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "grace_seconds": args.shutdown_grace_seconds,
            },
        )
        lifecycle.wait_for_workers(args.shutdown_grace_seconds)
        ACCEPT_LOGGER.info(
            "Server shutdown complete", extra={"event": "server_stopped"}
        )

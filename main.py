"""Single-request HTTP/1.1 server supporting echo, user-agent, and file operations."""

import logging
import signal
import sys
from typing import Optional

from oneshot.bootstrap.config import parse_cli_args
from oneshot.bootstrap.logging_setup import configure_logging
from oneshot.domain.correlation_id import CorrelationLoggerAdapter
from oneshot.lifecycle.state import ServerLifecycle
from oneshot.transport.accept_loop import run_server

SERVER_LOGGER = CorrelationLoggerAdapter(logging.getLogger("oneshot.server"), {})


def main(argv: Optional[list[str]] = None) -> None:
    """Start the HTTP server and spawn a worker thread per connection."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(
        args.log_level, args.log_destination, use_json=args.log_format == "json"
    )

    lifecycle = ServerLifecycle()

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal",
            extra={"event": "shutdown_signal", "signal": signum},
        )
        lifecycle.request_stop()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    SERVER_LOGGER.info(
        "Starting HTTP server",
        extra={
            "event": "server_starting",
            "host": args.host,
            "port": args.port,
            "directory": args.directory,
            "log_destination": args.log_destination,
            "log_level": args.log_level,
        },
    )
    run_server(args, lifecycle)


if __name__ == "__main__":
    main()

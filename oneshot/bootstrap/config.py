"""Server configuration and CLI argument parsing."""

import argparse
import os


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


DEFAULT_DIRECTORY = _env_str("ONESHOT_DIRECTORY", ".")
DEFAULT_HOST = _env_str("ONESHOT_HOST", "0.0.0.0")
DEFAULT_PORT = _env_int("ONESHOT_PORT", 4221)
DEFAULT_SHUTDOWN_GRACE_SECONDS = _env_int("ONESHOT_SHUTDOWN_GRACE_SECONDS", 5)

READ_BUFFER_BYTES = 1024
HEADER_DELIMITER = b"\r\n\r\n"
# Every byte maps onto one ISO-8859-1 character, so wire text round-trips exactly.
WIRE_ENCODING = "iso-8859-1"
ACCEPT_POLL_SECONDS = 0.5

ROOT_PATH = "/"
ECHO_PREFIX = "/echo"
ECHO_ENDPOINT_PREFIX = "/echo/"
USER_AGENT_PREFIX = "/user-agent"
FILES_PREFIX = "/files"
FILES_ENDPOINT_PREFIX = "/files/"
FILE_METHODS = {"GET", "POST"}


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(description="Single-request HTTP/1.1 server")
    parser.add_argument(
        "--directory",
        default=DEFAULT_DIRECTORY,
        help="Base directory for /files reads and writes",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    default_log_level = os.getenv("ONESHOT_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("ONESHOT_LOG_DESTINATION", "stdout")
    default_format = os.getenv("ONESHOT_LOG_FORMAT", "json").lower()
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-format",
        default=default_format,
        choices=["json", "text"],
        type=str.lower,
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=int,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="Seconds to wait for in-flight connections on shutdown",
    )
    return parser.parse_args(argv)

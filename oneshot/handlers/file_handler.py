"""File serving handlers."""

import logging
from pathlib import Path

from oneshot.domain.correlation_id import CorrelationLoggerAdapter
from oneshot.domain.http_types import HttpResponse
from oneshot.domain.response_builders import (
    bad_request_response,
    created_response,
    not_found_response,
    octet_stream_response,
)

FILE_LOGGER = CorrelationLoggerAdapter(logging.getLogger("oneshot.handlers.file"), {})


def join_base_path(directory: str, name: str) -> Path:
    """Join a request file name onto the base directory.

    Slash-separated segments are appended one by one, so a leading slash in
    the name never replaces the base directory. The result is not confined to
    the base directory.
    """
    return Path(directory).joinpath(*name.split("/"))


def read_file(directory: str, name: str) -> HttpResponse:
    """Return the file bytes, or 404 when the file cannot be read."""
    target = join_base_path(directory, name)
    try:
        payload = target.read_bytes()
    except OSError as error:
        FILE_LOGGER.info(
            "File not found",
            extra={
                "event": "file_not_found",
                "path": target.as_posix(),
                "error_type": type(error).__name__,
            },
        )
        return not_found_response()
    FILE_LOGGER.info(
        "File read operation complete",
        extra={
            "event": "file_read_complete",
            "path": target.as_posix(),
            "bytes_out": len(payload),
        },
    )
    return octet_stream_response(payload)


def create_file(directory: str, name: str, body: bytes) -> HttpResponse:
    """Create or overwrite the file with the request body.

    Parent directories are not created; any filesystem error maps to 400.
    """
    target = join_base_path(directory, name)
    if FILE_LOGGER.logger.isEnabledFor(logging.DEBUG):
        FILE_LOGGER.debug(
            "File write started",
            extra={
                "event": "file_write_started",
                "path": target.as_posix(),
                "bytes_in": len(body),
            },
        )
    try:
        with open(target, "wb") as file_handle:
            file_handle.write(body)
    except OSError as error:
        FILE_LOGGER.warning(
            "File write failed",
            extra={
                "event": "file_write_failed",
                "path": target.as_posix(),
                "error_type": type(error).__name__,
            },
        )
        return bad_request_response()
    FILE_LOGGER.info(
        "File write complete",
        extra={
            "event": "file_write_complete",
            "path": target.as_posix(),
            "bytes_in": len(body),
        },
    )
    return created_response()

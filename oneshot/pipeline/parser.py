"""Lenient HTTP request parsing.

The parser assumes a well-formed request line and header block. Anything it
cannot make sense of (a missing path token, a header line without a colon) is
skipped rather than rejected, so a malformed request still yields a best-effort
parse that the router answers with a normal response.
"""

import logging
from typing import Iterable

from oneshot.bootstrap.config import HEADER_DELIMITER, WIRE_ENCODING
from oneshot.domain.correlation_id import CorrelationLoggerAdapter
from oneshot.domain.http_types import HttpRequest

PARSER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("oneshot.pipeline.parser"), {}
)


def split_head_and_body(raw: bytes) -> tuple[str, bytes]:
    """Split raw request bytes on the first blank line."""
    head, delimiter, body = raw.partition(HEADER_DELIMITER)
    if not delimiter:
        return raw.decode(WIRE_ENCODING), b""
    return head.decode(WIRE_ENCODING), body


def parse_headers(lines: Iterable[str]) -> dict[str, str]:
    """Convert raw header lines into a lowercase-keyed dictionary."""
    parsed: dict[str, str] = {}
    for line in lines:
        line = line.strip()
        if not line:
            break
        name, separator, value = line.partition(":")
        if not separator:
            continue
        parsed[name.strip().lower()] = value.strip()
    return parsed


def _request_line_tokens(raw: bytes) -> list[str]:
    head, _ = split_head_and_body(raw)
    request_line = head.split("\n", 1)[0]
    return request_line.split(" ")


def parse_request_line(raw: bytes) -> tuple[str, str]:
    """Return the method and path tokens of the request line."""
    tokens = _request_line_tokens(raw)
    method = tokens[0].strip()
    path = tokens[1].strip() if len(tokens) > 1 else ""
    return method, path


def parse_request(raw: bytes) -> tuple[str, dict[str, str], bytes]:
    """Parse raw request bytes into method, headers and body."""
    head, body = split_head_and_body(raw)
    lines = head.split("\n")
    method = lines[0].split(" ")[0].strip()
    headers = parse_headers(lines[1:])
    return method, headers, body


def build_request(raw: bytes) -> HttpRequest:
    """Combine request-line and header parsing into an HttpRequest."""
    method, headers, body = parse_request(raw)
    _, path = parse_request_line(raw)
    if PARSER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        PARSER_LOGGER.debug(
            "Parsed request",
            extra={
                "event": "request_parsed",
                "method": method,
                "path": path,
                "bytes_in": len(raw),
            },
        )
    return HttpRequest(method, path, headers, body)

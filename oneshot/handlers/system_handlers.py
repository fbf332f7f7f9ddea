"""System handlers for echo and user-agent."""

import logging

from oneshot.domain.correlation_id import CorrelationLoggerAdapter
from oneshot.domain.http_types import HttpResponse
from oneshot.domain.response_builders import compressed_text_response, text_response

SYSTEM_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("oneshot.handlers.system"), {}
)


def handle_echo(text: str, accept_encoding: str) -> HttpResponse:
    """Return the text as a text/plain body, gzipped when the client accepts it."""
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "Echo request processed",
            extra={"event": "echo_request", "bytes_in": len(text)},
        )
    return compressed_text_response(text, accept_encoding)


def handle_user_agent(agent: str) -> HttpResponse:
    """Return the User-Agent header value as a text/plain body."""
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "User-agent request processed", extra={"event": "user_agent_request"}
        )
    return text_response(agent)

"""Request routing logic."""

import logging

from oneshot.bootstrap.config import (
    ECHO_ENDPOINT_PREFIX,
    ECHO_PREFIX,
    FILE_METHODS,
    FILES_ENDPOINT_PREFIX,
    FILES_PREFIX,
    ROOT_PATH,
    USER_AGENT_PREFIX,
)
from oneshot.domain.correlation_id import CorrelationLoggerAdapter
from oneshot.domain.http_types import HttpRequest, HttpResponse
from oneshot.domain.response_builders import (
    empty_response,
    method_not_allowed_response,
    not_found_response,
)
from oneshot.handlers.file_handler import create_file, read_file
from oneshot.handlers.system_handlers import handle_echo, handle_user_agent
from oneshot.transport.context import WorkerContext

ROUTER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("oneshot.pipeline.router"), {}
)


def _log_match(route: str, request: HttpRequest) -> None:
    if ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ROUTER_LOGGER.debug(
            "Route matched",
            extra={"event": "route_matched", "route": route, "method": request.method},
        )


def _route_files(request: HttpRequest, context: WorkerContext) -> HttpResponse:
    name = request.path.removeprefix(FILES_ENDPOINT_PREFIX)
    if request.method == "GET":
        return read_file(context.directory, name)
    if request.method == "POST":
        return create_file(context.directory, name, request.body)
    ROUTER_LOGGER.warning(
        "Unsupported method",
        extra={
            "event": "method_not_allowed",
            "route": request.path,
            "method": request.method,
        },
    )
    return method_not_allowed_response(FILE_METHODS)


def route_request(request: HttpRequest, context: WorkerContext) -> HttpResponse:
    """Dispatch to the first matching route, falling back to 404."""
    if request.path == ROOT_PATH:
        _log_match(ROOT_PATH, request)
        return empty_response()

    if request.path.startswith(ECHO_PREFIX):
        _log_match(ECHO_PREFIX, request)
        return handle_echo(
            request.path.removeprefix(ECHO_ENDPOINT_PREFIX),
            request.headers.get("accept-encoding", ""),
        )

    if request.path.startswith(USER_AGENT_PREFIX):
        _log_match(USER_AGENT_PREFIX, request)
        return handle_user_agent(request.headers.get("user-agent", ""))

    if request.path.startswith(FILES_PREFIX):
        _log_match(FILES_PREFIX, request)
        return _route_files(request, context)

    ROUTER_LOGGER.info(
        "No matching route found",
        extra={
            "event": "route_not_found",
            "route": request.path,
            "method": request.method,
        },
    )
    return not_found_response()

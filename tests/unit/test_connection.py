"""Unit tests for the per-connection read, dispatch, write cycle."""

import gzip
import logging
import socket
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from oneshot.domain.correlation_id import get_correlation_id
from oneshot.lifecycle.state import ServerLifecycle
from oneshot.transport.context import WorkerContext
from oneshot.transport.worker import handle_client
from tests.utils.http import parse_http_response

CLIENT_ADDRESS = ("127.0.0.1", 54321)


@pytest.fixture(name="context")
def fixture_context(tmp_path: Path) -> WorkerContext:
    """Worker context rooted in a temporary directory."""
    return WorkerContext(directory=str(tmp_path))


def _client(request_bytes: bytes) -> MagicMock:
    client = MagicMock(spec=socket.socket)
    client.recv.return_value = request_bytes
    return client


def _written(client: MagicMock) -> bytes:
    client.sendall.assert_called_once()
    return client.sendall.call_args[0][0]


def test_handle_client_reads_once_writes_once_and_closes(context):
    """Exactly one bounded read and one write happen per connection."""
    client = _client(b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n")

    handle_client(client, CLIENT_ADDRESS, context)

    client.recv.assert_called_once_with(1024)
    assert _written(client) == b"HTTP/1.1 200 OK\r\n\r\n"
    client.shutdown.assert_called_once_with(socket.SHUT_WR)
    client.close.assert_called_once()


def test_handle_client_gzip_echo_scenario(context):
    """A gzip-accepting echo request gets a compressed body."""
    client = _client(b"GET /echo/abc HTTP/1.1\r\nAccept-Encoding: gzip\r\n\r\n")

    handle_client(client, CLIENT_ADDRESS, context)

    response = parse_http_response(_written(client))
    assert response.status_line == "HTTP/1.1 200 OK"
    assert response.headers["content-encoding"] == "gzip"
    assert response.headers["content-type"] == "text/plain"
    assert int(response.headers["content-length"]) == len(response.body)
    assert gzip.decompress(response.body) == b"abc"


def test_handle_client_post_then_get_scenario(context, tmp_path: Path):
    """A POST creates the file and a later GET returns it."""
    post = _client(b"POST /files/a.txt HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello")
    handle_client(post, CLIENT_ADDRESS, context)
    assert _written(post) == b"HTTP/1.1 201 Created\r\n\r\n"
    assert (tmp_path / "a.txt").read_bytes() == b"hello"

    get = _client(b"GET /files/a.txt HTTP/1.1\r\n\r\n")
    handle_client(get, CLIENT_ADDRESS, context)
    response = parse_http_response(_written(get))
    assert response.status_line == "HTTP/1.1 200 OK"
    assert response.body == b"hello"


def test_handle_client_truncates_body_beyond_buffer(context, tmp_path: Path):
    """Only the bytes delivered by the single read are stored."""
    head = b"POST /files/big.txt HTTP/1.1\r\nContent-Length: 4000\r\n\r\n"
    raw = (head + b"x" * 4000)[:1024]
    handle_client(_client(raw), CLIENT_ADDRESS, context)
    assert (tmp_path / "big.txt").read_bytes() == b"x" * (1024 - len(head))


@pytest.mark.parametrize("header_name", [b"User-Agent", b"USER-AGENT", b"user-agent"])
def test_handle_client_header_lookup_is_case_insensitive(context, header_name):
    """Header casing from the client does not change the result."""
    client = _client(b"GET /user-agent HTTP/1.1\r\n" + header_name + b": foo\r\n\r\n")

    handle_client(client, CLIENT_ADDRESS, context)

    assert parse_http_response(_written(client)).body == b"foo"


def test_handle_client_empty_read_closes_without_response(context):
    """A client that sends nothing gets no response."""
    client = _client(b"")

    handle_client(client, CLIENT_ADDRESS, context)

    client.sendall.assert_not_called()
    client.close.assert_called_once()


def test_handle_client_logs_read_error_and_closes(context, caplog):
    """An OSError on read is connection scoped and logged."""
    caplog.set_level(logging.ERROR)
    client = MagicMock(spec=socket.socket)
    client.recv.side_effect = ConnectionResetError("reset")

    handle_client(client, CLIENT_ADDRESS, context)

    client.sendall.assert_not_called()
    client.close.assert_called_once()
    record = next(
        r for r in caplog.records if getattr(r, "event", None) == "connection_error"
    )
    assert record.client == "127.0.0.1:54321"
    assert record.error_type == "ConnectionResetError"


def test_handle_client_logs_write_error_and_closes(context, caplog):
    """An OSError on write is logged and the socket still closes."""
    caplog.set_level(logging.ERROR)
    client = _client(b"GET / HTTP/1.1\r\n\r\n")
    client.sendall.side_effect = BrokenPipeError("gone")
    client.shutdown.side_effect = OSError("not connected")

    handle_client(client, CLIENT_ADDRESS, context)

    client.close.assert_called_once()
    assert any(
        getattr(r, "event", None) == "connection_error" for r in caplog.records
    )


def test_handle_client_logs_unexpected_errors(context, caplog):
    """Unexpected dispatch failures are logged with a traceback."""
    caplog.set_level(logging.ERROR)
    client = _client(b"GET / HTTP/1.1\r\n\r\n")

    with patch(
        "oneshot.transport.worker.route_request", side_effect=RuntimeError("bug")
    ):
        handle_client(client, CLIENT_ADDRESS, context)

    record = next(
        r for r in caplog.records if getattr(r, "event", None) == "worker_error"
    )
    assert record.exc_info is not None
    client.close.assert_called_once()


def test_handle_client_logs_lifecycle_events(context, caplog):
    """Every event logged while serving one connection shares a correlation ID."""
    logging.getLogger("oneshot").setLevel(logging.DEBUG)
    caplog.set_level(logging.DEBUG)
    client = _client(b"GET /echo/x HTTP/1.1\r\n\r\n")

    try:
        handle_client(client, CLIENT_ADDRESS, context)
    finally:
        logging.getLogger("oneshot").setLevel(logging.NOTSET)

    by_event = {
        getattr(r, "event"): r for r in caplog.records if getattr(r, "event", None)
    }
    for event in (
        "request_started",
        "request_line_parsed",
        "request_complete",
        "socket_closed",
    ):
        assert event in by_event
    started = by_event["request_started"]
    assert started.correlation_id != "-"
    assert started.correlation_id == by_event["request_complete"].correlation_id
    assert by_event["request_complete"].status_code == 200
    assert get_correlation_id() is None


def test_handle_client_registers_with_lifecycle(tmp_path: Path):
    """Workers register and unregister themselves with the lifecycle."""
    lifecycle = MagicMock(spec=ServerLifecycle)
    context = WorkerContext(directory=str(tmp_path), lifecycle=lifecycle)

    handle_client(_client(b"GET / HTTP/1.1\r\n\r\n"), CLIENT_ADDRESS, context)

    lifecycle.register_worker.assert_called_once()
    lifecycle.cleanup_worker.assert_called_once()

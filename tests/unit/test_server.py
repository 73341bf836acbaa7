"""
Unit and end-to-end tests for the connection loop.
"""

import errno
import logging
import socket
from pathlib import Path

import pytest

from conftest import CrashingHandler, GetOnlyHandler, TestServer, send_raw
from minihttp import Server, WebsiteHandler
from minihttp.core import Connection, ConnectionState
from minihttp.http import Method, ParseError, Response, StatusCode
from minihttp.server import parse_address


class CrashingBadRequestHandler(GetOnlyHandler):
    """Answers like GetOnlyHandler but raises on malformed input."""

    def handle_bad_request(self, error: ParseError) -> Response:
        raise RuntimeError("bad request handler exploded")


class UnreadableSocket:
    """Stands in for a client socket whose recv() always fails."""

    def __init__(self, error: OSError):
        self.error = error
        self.closed = False

    def settimeout(self, timeout):
        pass

    def recv(self, bufsize: int) -> bytes:
        raise self.error

    def shutdown(self, how):
        pass

    def close(self):
        self.closed = True


def exchange(server: Server, handler, data: bytes) -> bytes:
    """Run handle_connection() over a socketpair and return what the client got."""
    server_sock, client_sock = socket.socketpair()
    with client_sock:
        if data:
            client_sock.sendall(data)
        client_sock.shutdown(socket.SHUT_WR)

        conn = Connection(socket=server_sock, address=("test", 0), buffer_size=server.buffer_size)
        server.handle_connection(conn, handler)
        assert conn.state == ConnectionState.CLOSED

        chunks = []
        while True:
            chunk = client_sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)


class TestParseAddress:
    """Tests for parse_address()."""

    def test_host_and_port(self):
        assert parse_address("127.0.0.1:8080") == ("127.0.0.1", 8080)

    def test_empty_host(self):
        assert parse_address(":9000") == ("", 9000)

    @pytest.mark.parametrize("addr", ["localhost", "localhost:", "localhost:http"])
    def test_invalid(self, addr: str):
        with pytest.raises(ValueError):
            parse_address(addr)

    def test_server_rejects_bad_address(self):
        with pytest.raises(ValueError):
            Server("no-port-here")


class TestDispatch:
    """Tests for Server.dispatch()."""

    def test_parsed_request_goes_to_handler(self, get_only_handler: GetOnlyHandler):
        server = Server("127.0.0.1:0")

        response = server.dispatch(b"GET /?a=1 HTTP/1.1\r\n\r\n", get_only_handler)

        assert response.status_code == StatusCode.OK
        request = get_only_handler.requests[0]
        assert request.method is Method.GET
        assert request.query_string["a"] == "1"

    def test_parse_error_goes_to_bad_request(self, get_only_handler: GetOnlyHandler):
        server = Server("127.0.0.1:0")

        response = server.dispatch(b"GET / HTTP/2\r\n\r\n", get_only_handler)

        assert response.status_code == StatusCode.BAD_REQUEST
        assert get_only_handler.requests == []

    def test_handler_exception_becomes_500(self, caplog):
        server = Server("127.0.0.1:0")

        with caplog.at_level(logging.ERROR, logger="minihttp"):
            response = server.dispatch(b"GET / HTTP/1.1\r\n\r\n", CrashingHandler())

        assert response.status_code == StatusCode.INTERNAL_SERVER_ERROR
        assert response.body is None
        assert "boom" in caplog.text

    def test_bad_request_handler_exception_becomes_500(self, caplog):
        server = Server("127.0.0.1:0")

        with caplog.at_level(logging.ERROR, logger="minihttp"):
            response = server.dispatch(b"GARBAGE\r\n", CrashingBadRequestHandler())

        assert response.status_code == StatusCode.INTERNAL_SERVER_ERROR
        assert response.body is None
        assert "bad request handler exploded" in caplog.text


class TestHandleConnection:
    """Tests for one exchange over a connected socket pair."""

    def test_get_index(self, get_only_handler: GetOnlyHandler):
        result = exchange(Server("127.0.0.1:0"), get_only_handler,
                          b"GET / HTTP/1.1\r\nHost: x\r\n\r\n")

        assert result == b"HTTP/1.1 200 OK\r\n\r\nindex"
        request = get_only_handler.requests[0]
        assert request.method is Method.GET
        assert request.path == "/"
        assert request.query_string is None

    def test_post_not_found(self, get_only_handler: GetOnlyHandler):
        result = exchange(Server("127.0.0.1:0"), get_only_handler,
                          b"POST /submit HTTP/1.1\r\n\r\n")

        assert result == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_garbage_is_bad_request(self, get_only_handler: GetOnlyHandler):
        result = exchange(Server("127.0.0.1:0"), get_only_handler, b"GARBAGE\r\n")

        assert result == b"HTTP/1.1 400 Bad Request\r\n\r\n"
        assert get_only_handler.requests == []

    def test_invalid_encoding_is_bad_request(self, get_only_handler: GetOnlyHandler):
        result = exchange(Server("127.0.0.1:0"), get_only_handler,
                          b"GET /\xff HTTP/1.1\r\n\r\n")

        assert result == b"HTTP/1.1 400 Bad Request\r\n\r\n"

    def test_client_disconnect_sends_nothing(self, get_only_handler: GetOnlyHandler, caplog):
        with caplog.at_level(logging.INFO, logger="minihttp"):
            result = exchange(Server("127.0.0.1:0"), get_only_handler, b"")

        assert result == b""
        assert get_only_handler.requests == []
        assert "Client disconnected" in caplog.text

    def test_oversized_request_is_truncated(self, get_only_handler: GetOnlyHandler, caplog):
        """Only buffer_size bytes are read; the request line still parses."""
        raw = b"GET / HTTP/1.1\r\nX-Padding: " + b"a" * 200 + b"\r\n\r\n"

        with caplog.at_level(logging.WARNING, logger="minihttp"):
            result = exchange(Server("127.0.0.1:0", buffer_size=64), get_only_handler, raw)

        assert result == b"HTTP/1.1 200 OK\r\n\r\nindex"
        assert "truncated" in caplog.text

    def test_write_failure_is_logged_not_raised(self, get_only_handler: GetOnlyHandler, caplog):
        server_sock, client_sock = socket.socketpair()
        client_sock.sendall(b"GET / HTTP/1.1\r\n\r\n")
        client_sock.close()

        conn = Connection(socket=server_sock, address=("test", 0))
        # Close our side for writing so the response write fails
        server_sock.shutdown(socket.SHUT_WR)

        with caplog.at_level(logging.ERROR, logger="minihttp"):
            Server("127.0.0.1:0").handle_connection(conn, get_only_handler)

        assert conn.state == ConnectionState.CLOSED
        assert "Failed to send response" in caplog.text

    @pytest.mark.parametrize("error", [
        OSError(errno.EIO, "I/O error"),
        ConnectionResetError(errno.ECONNRESET, "Connection reset by peer"),
    ])
    def test_read_failure_is_logged_not_raised(self, get_only_handler: GetOnlyHandler,
                                               caplog, error: OSError):
        sock = UnreadableSocket(error)
        conn = Connection(socket=sock, address=("test", 0))

        with caplog.at_level(logging.INFO, logger="minihttp"):
            Server("127.0.0.1:0").handle_connection(conn, get_only_handler)

        assert sock.closed
        assert conn.state == ConnectionState.CLOSED
        assert get_only_handler.requests == []
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert any("Failed to read from connection" in r.getMessage() for r in errors)
        assert "Client disconnected" not in caplog.text


class TestServerEndToEnd:
    """Tests against a real server on a loopback port."""

    def test_get_index(self, test_server: TestServer):
        assert test_server.request(b"GET / HTTP/1.1\r\nHost: x\r\n\r\n") == b"HTTP/1.1 200 OK\r\n\r\nindex"

    def test_post_not_found(self, test_server: TestServer):
        assert test_server.request(b"POST /submit HTTP/1.1\r\n\r\n") == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_garbage_is_bad_request(self, test_server: TestServer):
        assert test_server.request(b"GARBAGE\r\n") == b"HTTP/1.1 400 Bad Request\r\n\r\n"

    def test_keeps_serving_after_disconnect(self, test_server: TestServer):
        """A client that sends nothing does not stop the server."""
        assert test_server.request(b"") == b""

        assert test_server.request(b"GET / HTTP/1.1\r\n\r\n") == b"HTTP/1.1 200 OK\r\n\r\nindex"

    def test_sequential_clients(self, test_server: TestServer):
        for _ in range(3):
            assert test_server.request(b"GET / HTTP/1.1\r\n\r\n").startswith(b"HTTP/1.1 200 OK")

    def test_keeps_serving_after_bad_request_handler_crash(self):
        srv = TestServer(Server("127.0.0.1:0"), CrashingBadRequestHandler())
        srv.start()
        try:
            assert srv.request(b"GARBAGE\r\n") == b"HTTP/1.1 500 Internal Server Error\r\n\r\n"
            assert srv._thread.is_alive()

            assert srv.request(b"GET / HTTP/1.1\r\n\r\n") == b"HTTP/1.1 200 OK\r\n\r\nindex"
        finally:
            srv.stop()

    def test_keeps_accepting_after_accept_failure(self, get_only_handler: GetOnlyHandler,
                                                   monkeypatch, caplog):
        real_accept = socket.socket.accept
        failures = []

        def accept_once_failing(sock):
            if not failures:
                failures.append(sock)
                raise OSError(errno.EMFILE, "Too many open files")
            return real_accept(sock)

        monkeypatch.setattr(socket.socket, "accept", accept_once_failing)

        srv = TestServer(Server("127.0.0.1:0"), get_only_handler)
        with caplog.at_level(logging.ERROR, logger="minihttp"):
            srv.start()
            try:
                assert srv.request(b"GET / HTTP/1.1\r\n\r\n") == b"HTTP/1.1 200 OK\r\n\r\nindex"
            finally:
                srv.stop()

        assert len(failures) == 1
        assert "Failed to establish a connection" in caplog.text

    def test_shutdown_stops_listening(self, get_only_handler: GetOnlyHandler):
        srv = TestServer(Server("127.0.0.1:0"), get_only_handler)
        srv.start()
        address = srv.address

        srv.stop()

        assert not srv._thread.is_alive()
        with pytest.raises(OSError):
            send_raw(address, b"GET / HTTP/1.1\r\n\r\n", timeout=1.0)

    def test_bind_failure_raises(self, test_server: TestServer, get_only_handler: GetOnlyHandler):
        host, port = test_server.address
        other = Server(f"{host}:{port}")

        with pytest.raises(OSError):
            other.run(get_only_handler)

    def test_website_handler(self, public_dir: Path):
        srv = TestServer(Server("127.0.0.1:0"), WebsiteHandler(str(public_dir)))
        srv.start()
        try:
            assert srv.request(b"GET /hello HTTP/1.1\r\n\r\n") == b"HTTP/1.1 200 OK\r\n\r\n<h1>Hello</h1>"
            assert srv.request(b"GET /../secret.txt HTTP/1.1\r\n\r\n") == b"HTTP/1.1 404 Not Found\r\n\r\n"
        finally:
            srv.stop()

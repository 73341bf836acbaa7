"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Tuple
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import Server, Handler
from minihttp.http import Method, Request, Response, StatusCode


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request with a query string and headers."""
    return (
        b"GET /api/users?page=1&limit=10 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: application/json\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body (which the parser ignores)."""
    body = b'{"name": "John", "email": "john@example.com"}'
    return (
        b"POST /submit HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
        + body
    )


class GetOnlyHandler(Handler):
    """Answers GET / with "index", every other request with 404."""

    def __init__(self):
        self.requests = []

    def handle_request(self, request: Request) -> Response:
        self.requests.append(request)
        if request.method is Method.GET and request.path == "/":
            return Response(StatusCode.OK, "index")
        return Response(StatusCode.NOT_FOUND)


class CrashingHandler(Handler):
    """Raises from handle_request to exercise the 500 path."""

    def handle_request(self, request: Request) -> Response:
        raise RuntimeError("boom")


@pytest.fixture
def get_only_handler() -> GetOnlyHandler:
    return GetOnlyHandler()


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """A public directory with a few files, plus a secret file outside it."""
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<h1>Welcome</h1>")
    (public / "hello.html").write_text("<h1>Hello</h1>")
    (public / "style.css").write_text("body { color: red; }")
    (public / "docs").mkdir()
    (public / "docs" / "readme.txt").write_text("nested file")
    (tmp_path / "secret.txt").write_text("top secret")
    return public


def send_raw(address: Tuple[str, int], data: bytes, timeout: float = 5.0) -> bytes:
    """Send raw bytes to a server and read the reply until it closes."""
    with socket.create_connection(address, timeout=timeout) as sock:
        if data:
            sock.sendall(data)
        sock.shutdown(socket.SHUT_WR)

        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class, despite the name

    def __init__(self, server: Server, handler: Handler):
        self.server = server
        self.handler = handler
        self._thread: threading.Thread = None

    @property
    def address(self) -> Tuple[str, int]:
        return self.server.bound_address

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(
            target=self.server.run,
            args=(self.handler,),
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server and wait for its thread."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, data: bytes) -> bytes:
        return send_raw(self.address, data)


@pytest.fixture
def test_server(get_only_handler: GetOnlyHandler) -> Generator[TestServer, None, None]:
    """A running server on a free loopback port using GetOnlyHandler."""
    test_srv = TestServer(Server("127.0.0.1:0"), get_only_handler)
    test_srv.start()

    yield test_srv

    test_srv.stop()

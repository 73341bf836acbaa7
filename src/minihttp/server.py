"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the transport (SocketServer, Connection) to the protocol (Request,
Response) and the application (Handler).

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   ACCEPT     SocketServer.accept()       fail → log, keep accepting │
    │      │                                                               │
    │      ▼                                                               │
    │   READ       conn.read_request()         b""  → client gone, close   │
    │      │                                   fail → log, close           │
    │      ▼                                                               │
    │   PARSE      parse_request(bytes)                                    │
    │      │                                                               │
    │      ├── ok ──────► handler.handle_request(request)                  │
    │      │                  (raises → log, 500)                          │
    │      │                                                               │
    │      └── ParseError ► handler.handle_bad_request(error)  → 400       │
    │                         (raises → log, 500)                          │
    │                                                                      │
    │      ▼                                                               │
    │   RESPOND    response.send(socket stream) fail → log, close          │
    │      │                                                               │
    │      ▼                                                               │
    │   CLOSE, back to ACCEPT                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing that goes wrong with one client stops the server. Only a failure
to bind at startup is raised to the caller.

=============================================================================
"""

import logging
from typing import Optional, Tuple

from .config import DEFAULT_BUFFER_SIZE
from .core import SocketServer, Connection
from .handlers.base import Handler
from .http import ParseError, Response, StatusCode, parse_request


logger = logging.getLogger(__name__)


def parse_address(addr: str) -> Tuple[str, int]:
    """
    Split a "host:port" bind address.

    Example:
        parse_address("127.0.0.1:8080")  # ("127.0.0.1", 8080)

    Raises:
        ValueError: If there is no ":" or the port is not an integer.
    """
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid address (expected host:port): {addr!r}")
    return host, int(port)


class Server:
    """
    Single-threaded HTTP/1.1 server.

    Usage:
        server = Server("127.0.0.1:8080")
        server.run(WebsiteHandler("./public"))  # Blocks until shutdown
    """

    def __init__(self, addr: str, buffer_size: int = DEFAULT_BUFFER_SIZE):
        """
        Initialize the server.

        Args:
            addr: Address to bind, as "host:port".
            buffer_size: Bytes read per request. Longer requests are
                         truncated to this size.

        Raises:
            ValueError: If addr is not "host:port".
        """
        self.addr = addr
        self.buffer_size = buffer_size
        self._socket_server = SocketServer(parse_address(addr), buffer_size=buffer_size)

    @property
    def bound_address(self) -> Optional[Tuple[str, int]]:
        """The (host, port) actually bound while running, else None."""
        return self._socket_server.bound_address

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def run(self, handler: Handler):
        """
        Serve requests with the given handler (blocking).

        Returns after shutdown() is called or SIGINT/SIGTERM is received.

        Raises:
            OSError: If the address cannot be bound.
        """
        logger.info(f"Server is running on {self.addr} with {handler.name}")
        self._socket_server.start(lambda conn: self.handle_connection(conn, handler))

    def shutdown(self):
        """Stop accepting connections. run() returns within a second."""
        self._socket_server.shutdown()

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def handle_connection(self, conn: Connection, handler: Handler):
        """
        Run one read → parse → dispatch → respond exchange, then close.

        Never raises for client-side problems: read and write failures are
        logged and end this connection only.
        """
        with conn:
            try:
                data = conn.read_request()
            except OSError as e:
                logger.error(f"[{conn.id}] Failed to read from connection: {e}")
                return

            if data is None:
                logger.info(f"[{conn.id}] Client disconnected")
                return

            logger.debug(
                f"[{conn.id}] Received a request from {conn.client_ip}:\n"
                f"{data.decode('utf-8', errors='replace')}"
            )

            response = self.dispatch(data, handler)
            if conn.send_response(response):
                logger.debug(f"[{conn.id}] {response.status_line}")

    def dispatch(self, data: bytes, handler: Handler) -> Response:
        """
        Parse raw request bytes and let the handler produce a response.

        Args:
            data: Raw bytes read from the client.
            handler: The application handler.

        Returns:
            The handler's response. A parse failure goes through
            handle_bad_request(). An exception from either handler method
            becomes a 500 with no body.
        """
        try:
            request = parse_request(data)
        except ParseError as e:
            respond, arg = handler.handle_bad_request, e
        else:
            respond, arg = handler.handle_request, request

        try:
            return respond(arg)
        except Exception as e:
            logger.exception(f"Handler {handler.name} failed: {e}")
            return Response(StatusCode.INTERNAL_SERVER_ERROR)

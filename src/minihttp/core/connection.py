"""
=============================================================================
CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one request/response exchange.

=============================================================================
ONE READ, ONE REQUEST
=============================================================================

TCP is a byte stream. It does not preserve message boundaries, so in
general a request may arrive split across several recv() calls.

This server deliberately does NOT reassemble requests. It issues a single
recv() of at most buffer_size bytes and treats whatever arrived as the
whole request:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   recv(1024)                                                         │
    │       │                                                              │
    │       ├── b""             → peer closed the connection, no request   │
    │       │                                                              │
    │       ├── 1..1023 bytes   → the request                              │
    │       │                                                              │
    │       └── exactly 1024    → the request, POSSIBLY TRUNCATED          │
    │                             (logged as a warning, still parsed)     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

In practice a request line sent by curl or a browser fits in the first
segment, and only the request line is parsed.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► PROCESSING ──────► WRITING
                   │                                  │
                   ▼                                  ▼
                 CLOSED ◄─────────────────────────────┘

There is no keep-alive: every connection is closed after one response.

=============================================================================
"""

import socket
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from ..config import DEFAULT_BUFFER_SIZE
from ..http.response import Response


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Where a connection is in its single exchange."""
    NEW = "new"                # Just accepted, nothing read yet
    READING = "reading"        # Waiting for the request bytes
    PROCESSING = "processing"  # Request read, handler is executing
    WRITING = "writing"        # Sending the response
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    One accepted client, good for a single request and response.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        buffer_size: Maximum bytes read for the request.
        id: Short unique identifier used in log lines.
        state: Current connection state.
    """

    socket: socket.socket
    address: tuple = ("", 0)
    buffer_size: int = DEFAULT_BUFFER_SIZE

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW

    def __post_init__(self):
        # Blocking, with no timeout: a silent client holds the server
        self.socket.settimeout(None)

    @property
    def client_ip(self) -> str:
        """Client IP, used in log lines."""
        return self.address[0] if self.address else ""

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read the request with a single recv().

        Returns:
            The bytes received, or None if the client closed the connection
            before sending anything.

        Raises:
            OSError: On any socket error, including a reset by the peer.
        """
        self.state = ConnectionState.READING

        data = self.socket.recv(self.buffer_size)
        if not data:
            return None

        if len(data) == self.buffer_size:
            logger.warning(
                f"[{self.id}] Request filled the {self.buffer_size}-byte buffer "
                f"and may be truncated"
            )

        self.state = ConnectionState.PROCESSING
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, response: Response) -> bool:
        """
        Stream a response to the client.

        The response writes itself into a buffered file object layered on
        the socket, which is flushed once at the end.

        Args:
            response: The response to send.

        Returns:
            True if the response was sent, False if the write failed.
        """
        self.state = ConnectionState.WRITING

        try:
            with self.socket.makefile("wb") as stream:
                response.send(stream)
            return True
        except OSError as e:
            logger.error(f"[{self.id}] Failed to send response: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR) sends FIN so the client sees end-of-response
        2. Drain anything the client sent that we never read (e.g. the tail
           of an oversized request), so close() doesn't send a RST that could
           discard the response on the client side
        3. close() releases the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

"""
=============================================================================
LISTENING SOCKET
=============================================================================

SocketServer owns the one listening socket of a minihttp server and turns
each accepted client into a Connection. It knows nothing about HTTP.

    start()
       │
       ├── bind(host, port)     fails → logged, socket closed, OSError raised
       ├── listen(backlog)
       ├── ready event set      wait_until_ready() returns True
       │
       ├── accept loop          (see below)
       │
       └── cleanup              signal handlers restored, socket closed

=============================================================================
ONE CLIENT AT A TIME
=============================================================================

The accept loop calls the connection handler DIRECTLY, on the same thread:

    while running:
        conn = accept()
        connection_handler(conn)      ◄── blocks until the exchange is done
        (only now is the next client accepted)

While one client is being served, new clients wait in the kernel's listen
backlog. A client that connects and never sends anything holds the whole
server until it disconnects.

A failed accept() (for example EMFILE) is logged and the loop carries on.

=============================================================================
SHUTDOWN
=============================================================================

accept() times out every ACCEPT_POLL_INTERVAL seconds so the loop can
notice that shutdown() was called:

    while self._running:
        try:
            accept()
        except timeout:
            continue        # re-check self._running

SIGINT (Ctrl+C) and SIGTERM trigger shutdown() when the server runs on the
main thread. Signal handlers can only be installed there, so a server
started on a background thread (as the tests do) is stopped by calling
shutdown() directly.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Callable, Optional, Tuple

from ..config import DEFAULT_BUFFER_SIZE
from .connection import Connection


logger = logging.getLogger(__name__)


# Seconds between checks of the running flag while waiting in accept().
ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Accepts TCP clients and hands each one to a callback, serially.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(("127.0.0.1", 8080))
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(
        self,
        address: Tuple[str, int],
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        backlog: int = 128,
    ):
        """
        Configure the listener. Nothing is opened until start().

        Args:
            address: (host, port) to bind. Port 0 lets the OS pick one.
            buffer_size: Read size handed to each Connection.
            backlog: Connections the kernel queues while we're busy.
        """
        self.address = address
        self.buffer_size = buffer_size
        self.backlog = backlog

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the socket is listening, so other threads can wait for it
        self._ready_event = threading.Event()
        self._saved_handlers: dict = {}

    @property
    def bound_address(self) -> Optional[Tuple[str, int]]:
        """The (host, port) actually bound, or None before start()."""
        if self._socket is None:
            return None
        return self._socket.getsockname()[:2]

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._ready_event.wait(timeout)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # SO_REUSEADDR: restart without "Address already in use" while the
        # previous socket sits in TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """Install SIGINT/SIGTERM handlers that call shutdown()."""
        if threading.current_thread() is not threading.main_thread():
            return

        def on_signal(signum, frame):
            name = signal.Signals(signum).name
            logger.info(f"{name} received, stopping")
            self.shutdown()

        self._saved_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, on_signal)
        self._saved_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, on_signal)

    def _restore_signals(self):
        """Put back whatever handlers were installed before start()."""
        for sig, handler in self._saved_handlers.items():
            signal.signal(sig, handler)
        self._saved_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen, and accept connections until shutdown() is called.

        Args:
            connection_handler: Called with each accepted Connection, on
                                this thread. The next accept() waits for
                                it to return.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind(self.address)
        except OSError as e:
            logger.error(f"Failed to bind to {self.address[0]}:{self.address[1]}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.backlog)

        self._running = True
        self._setup_signals()

        host, port = self.bound_address
        logger.info(f"Listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """Accept clients one at a time and hand each to connection_handler."""
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._running:
                    break
                # e.g. EMFILE: log it and keep accepting
                logger.error(f"Failed to establish a connection: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.buffer_size,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop the accept loop.

        Safe to call from another thread or a signal handler, and safe to
        call more than once. The loop exits within ACCEPT_POLL_INTERVAL.
        """
        if self._running:
            logger.info("Shutdown requested")
        self._running = False

    def _cleanup(self):
        """Restore signal handlers and close the listening socket."""
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready_event.clear()
        logger.info("Stopped accepting connections")

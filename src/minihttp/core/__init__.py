"""
=============================================================================
CORE NETWORKING
=============================================================================

    socket_server.py   Listening socket and the one-at-a-time accept loop
    connection.py      Single-exchange wrapper around a client socket

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = ["SocketServer", "Connection", "ConnectionState"]

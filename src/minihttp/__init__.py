"""
=============================================================================
MINIHTTP - A Minimal HTTP/1.1 Server Built From Raw Sockets
=============================================================================

A small HTTP/1.1 server: a request-line parser, a single-threaded
accept/read/respond loop, and a pluggable Handler interface.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttp)
    ├── server.py            # Server: the connection loop
    ├── config.py            # ServerConfig dataclass, logging setup
    ├── core/                # Low-level networking
    │   ├── socket_server.py # Listening socket, accept loop
    │   └── connection.py    # One client exchange
    ├── http/                # HTTP protocol
    │   ├── method.py        # Method enum
    │   ├── query_string.py  # Multi-valued query strings
    │   ├── request.py       # Request-line parsing
    │   ├── response.py      # Response serialization
    │   └── status_codes.py  # StatusCode enum
    └── handlers/            # Request handlers
        ├── base.py          # Handler interface
        └── website.py       # Static file serving

=============================================================================
QUICK START
=============================================================================

    from minihttp import Server, Handler, Response, StatusCode

    class Hello(Handler):
        def handle_request(self, request):
            return Response(StatusCode.OK, f"Hello from {request.path}")

    Server("127.0.0.1:8080").run(Hello())

=============================================================================
"""

__version__ = "1.0.0"

from .server import Server
from .config import ServerConfig
from .handlers import Handler, WebsiteHandler
from .http import Method, Request, Response, StatusCode, ParseError, ParseErrorKind

__all__ = [
    "Server",
    "ServerConfig",
    "Handler",
    "WebsiteHandler",
    "Method",
    "Request",
    "Response",
    "StatusCode",
    "ParseError",
    "ParseErrorKind",
    "__version__",
]

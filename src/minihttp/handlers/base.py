"""
=============================================================================
HANDLER INTERFACE
=============================================================================

The boundary between the transport loop and application logic.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Server (transport)                  Handler (application)          │
    │   ──────────────────                  ─────────────────────          │
    │                                                                      │
    │   accept()                                                           │
    │   recv() → bytes                                                     │
    │   parse_request(bytes)                                               │
    │        │                                                             │
    │        ├── Request ────────────────►  handle_request(request)        │
    │        │                                       │                     │
    │        └── ParseError ─────────────►  handle_bad_request(error)      │
    │                                                │                     │
    │   response.send(stream)  ◄──────────── Response                      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The server never knows what a handler does with a request. A handler
never touches a socket. That split lets the parser and the loop be tested
with a trivial handler, and lets a handler be tested with hand-built
Request objects.

=============================================================================
WRITING A HANDLER
=============================================================================

    class HelloHandler(Handler):
        def handle_request(self, request: Request) -> Response:
            if request.method is Method.GET and request.path == "/":
                return Response(StatusCode.OK, "hello")
            return Response(StatusCode.NOT_FOUND)

handle_request() is required. handle_bad_request() already has a default
(log and answer 400 with no body) and only needs overriding when a
handler wants a different reply to malformed input.

=============================================================================
"""

import logging
from abc import ABC, abstractmethod

from ..http.request import Request, ParseError
from ..http.response import Response
from ..http.status_codes import StatusCode


logger = logging.getLogger(__name__)


class Handler(ABC):
    """Produces a Response for each request the server receives."""

    @abstractmethod
    def handle_request(self, request: Request) -> Response:
        """
        Handle a successfully parsed request.

        Args:
            request: The parsed request line.

        Returns:
            The response to send back.
        """

    def handle_bad_request(self, error: ParseError) -> Response:
        """
        Handle a request that failed to parse.

        Default: log the failure and answer 400 Bad Request with no body.

        Args:
            error: The parse failure, with its kind in error.kind.

        Returns:
            The response to send back.
        """
        logger.warning(f"Failed to parse request: {error}")
        return Response(StatusCode.BAD_REQUEST)

    @property
    def name(self) -> str:
        """Get the handler name for logging."""
        return self.__class__.__name__

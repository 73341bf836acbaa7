"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    Handler          Abstract interface the server dispatches to
    WebsiteHandler   Serves files from a public directory

=============================================================================
USAGE EXAMPLES
=============================================================================

    # Serve ./public
    from minihttp.handlers import WebsiteHandler

    Server("127.0.0.1:8080").run(WebsiteHandler("./public"))

    # Custom handler
    from minihttp.handlers import Handler

    class EchoPath(Handler):
        def handle_request(self, request):
            return Response(StatusCode.OK, request.path)

=============================================================================
"""

from .base import Handler
from .website import WebsiteHandler

__all__ = [
    "Handler",
    "WebsiteHandler",
]

"""
=============================================================================
WEBSITE HANDLER
=============================================================================

Serves files from a public directory for GET requests.

=============================================================================
ROUTING
=============================================================================

    ┌────────────────────────┬────────────────────────────────────────────┐
    │  Request               │  Response                                  │
    ├────────────────────────┼────────────────────────────────────────────┤
    │  GET /                 │  public/index.html                         │
    │  GET /hello            │  public/hello.html                         │
    │  GET /style.css        │  public/style.css                          │
    │  GET /missing.txt      │  404 Not Found                             │
    │  GET /../secret.txt    │  404 Not Found (traversal attempt logged)  │
    │  POST / (any non-GET)  │  404 Not Found                             │
    └────────────────────────┴────────────────────────────────────────────┘

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

The URL path is joined onto the public directory, so a request like

    GET /../../../etc/passwd HTTP/1.1

would otherwise read /etc/passwd. Protection:

    1. Resolve the full path (normalizes ".." and follows symlinks)
    2. Check the resolved path is still inside the public directory
    3. If not, answer 404 exactly like a missing file

    full_path = (public_path / user_input).resolve()
    full_path.relative_to(public_path)  # Raises ValueError if outside!

The attacker gets no hint that the file exists.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from ..http.method import Method
from ..http.request import Request
from ..http.response import Response
from ..http.status_codes import StatusCode
from .base import Handler


logger = logging.getLogger(__name__)


class WebsiteHandler(Handler):
    """
    Handler that maps URL paths to files under a public directory.

    Usage:
        handler = WebsiteHandler("./public")
        Server("127.0.0.1:8080").run(handler)
    """

    # Paths with a fixed file, checked before the generic file lookup
    PAGES = {
        "/": "index.html",
        "/hello": "hello.html",
    }

    def __init__(self, public_path: str):
        """
        Initialize the website handler.

        Args:
            public_path: Directory to serve files from.
                         All served files MUST be inside this directory.

        Raises:
            ValueError: If public_path is not an existing directory.
        """
        # Resolve to absolute path (the traversal check compares against it)
        self.public_path = Path(public_path).resolve()

        if not self.public_path.is_dir():
            raise ValueError(f"Public directory does not exist: {public_path}")

    def handle_request(self, request: Request) -> Response:
        """Serve the file for a GET request, 404 for everything else."""
        if request.method is not Method.GET:
            return Response(StatusCode.NOT_FOUND)

        file_path = self.PAGES.get(request.path, request.path)
        contents = self.read_file(file_path)
        if contents is None:
            return Response(StatusCode.NOT_FOUND)
        return Response(StatusCode.OK, contents)

    def read_file(self, file_path: str) -> Optional[str]:
        """
        Read a text file from the public directory.

        Args:
            file_path: Path relative to the public directory. Leading
                       slashes are ignored ("/a.txt" and "a.txt" match).

        Returns:
            The file contents, or None if the file is missing, unreadable,
            not text, or outside the public directory.
        """
        # ─────────────────────────────────────────────────────────────────
        # RESOLVE FULL FILESYSTEM PATH
        # ─────────────────────────────────────────────────────────────────
        try:
            full_path = (self.public_path / file_path.lstrip("/")).resolve()
        except (OSError, ValueError) as e:
            # e.g. embedded NUL bytes or a symlink loop
            logger.error(f"Error resolving path {file_path!r}: {e}")
            return None

        # ─────────────────────────────────────────────────────────────────
        # SECURITY: PATH TRAVERSAL CHECK
        # ─────────────────────────────────────────────────────────────────
        try:
            full_path.relative_to(self.public_path)
        except ValueError:
            logger.warning(f"Path traversal attempt: {file_path}")
            return None

        if not full_path.is_file():
            logger.debug(f"File not found: {full_path}")
            return None

        try:
            return full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading file {full_path}: {e}")
            return None

"""
=============================================================================
HTTP RESPONSE
=============================================================================

A status code plus an optional text body, written straight to a stream.

=============================================================================
WIRE FORMAT
=============================================================================

    HTTP/1.1 200 OK\r\n          ← Status line
    \r\n                         ← Empty line (end of headers)
    <body>                       ← Body text, UTF-8 (may be empty)

No headers are sent, not even Content-Length. The client knows the body
has ended because the server closes the connection after every response.

=============================================================================
STREAMING, NOT RENDERING
=============================================================================

send() writes the status line and then the body directly to the output
stream. There is no step that first builds one big string holding the
whole response:

    Render-then-copy:                Streaming:
        text = status + body            stream.write(status)
        stream.write(text)              stream.write(body)
        (body copied twice)             (body written once)

Anything with a write(bytes) method works as the stream: a socket file
object from sock.makefile("wb"), an io.BytesIO in tests, a file on disk.

=============================================================================
"""

import io
from dataclasses import dataclass
from typing import BinaryIO, Optional

from .status_codes import StatusCode


# Responses always claim HTTP/1.1, matching the only accepted request protocol.
HTTP_VERSION = "HTTP/1.1"


@dataclass
class Response:
    """
    An HTTP response to be sent to the client.

    Built by a Handler for one request, sent exactly once, then discarded.

    Example:
        Response(StatusCode.OK, "hello").to_bytes()
        # b"HTTP/1.1 200 OK\\r\\n\\r\\nhello"

        Response(StatusCode.NOT_FOUND).to_bytes()
        # b"HTTP/1.1 404 Not Found\\r\\n\\r\\n"
    """

    status_code: StatusCode
    body: Optional[str] = None

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line (without the trailing CRLF).

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{HTTP_VERSION} {int(self.status_code)} {self.status_code.reason_phrase}"

    def send(self, stream: BinaryIO) -> None:
        """
        Write this response to a binary stream.

        Args:
            stream: Destination with a write(bytes) method.

        Raises:
            OSError: If the underlying write fails. Nothing is retried.
        """
        stream.write(f"{self.status_line}\r\n\r\n".encode("ascii"))
        if self.body:
            stream.write(self.body.encode("utf-8"))

    def to_bytes(self) -> bytes:
        """Serialize the response through send() into an in-memory buffer."""
        buffer = io.BytesIO()
        self.send(buffer)
        return buffer.getvalue()

"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can answer with, and their reason phrases.

=============================================================================
STATUS LINE ANATOMY
=============================================================================

    HTTP/1.1 404 Not Found\r\n
    ───┬──── ─┬─ ────┬────
       │      │      │
    Version  Code  Reason phrase

The code is what clients act on. The reason phrase is only for humans
reading the raw traffic, but HTTP/1.1 still expects one to be present.

    ┌────────┬──────────────────────────────────────────────────────────┐
    │  Code  │ When we send it                                          │
    ├────────┼──────────────────────────────────────────────────────────┤
    │  200   │ Handler produced a response                              │
    │  400   │ Request line could not be parsed                         │
    │  404   │ No file for the path, or a method we don't dispatch      │
    │  500   │ Handler raised instead of returning a response           │
    └────────┴──────────────────────────────────────────────────────────┘

New codes are added by extending the enum AND the phrase table below.

=============================================================================
"""

from enum import IntEnum


class StatusCode(IntEnum):
    """
    HTTP status codes as an integer enum.

    Because it is an IntEnum, members compare equal to plain ints:

        >>> StatusCode.OK == 200
        True
        >>> str(int(StatusCode.NOT_FOUND))
        '404'
    """

    OK = 200                        # Request handled
    BAD_REQUEST = 400               # Malformed request line
    NOT_FOUND = 404                 # Nothing to serve for this request
    INTERNAL_SERVER_ERROR = 500     # Handler crashed

    @property
    def reason_phrase(self) -> str:
        """
        Get the reason phrase for this status code.

        Example:
            StatusCode.NOT_FOUND.reason_phrase  # "Not Found"
        """
        return _REASON_PHRASES[self]


_REASON_PHRASES = {
    StatusCode.OK: "OK",
    StatusCode.BAD_REQUEST: "Bad Request",
    StatusCode.NOT_FOUND: "Not Found",
    StatusCode.INTERNAL_SERVER_ERROR: "Internal Server Error",
}

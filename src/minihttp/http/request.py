"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes of one socket read into a structured Request.

Only the REQUEST LINE is parsed. Headers and body are ignored entirely:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WHAT THE PARSER LOOKS AT                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    GET /search?q=python&page=2 HTTP/1.1\r\n     ◄── parsed          │
    │    ─┬─ ───────────┬─────────── ────┬───                             │
    │     │             │                │                                 │
    │   Method        Path            Protocol                            │
    │                   │                                                  │
    │        ┌──────────┴──────────┐                                      │
    │        │                     │                                       │
    │      Path              Query string                                 │
    │    /search          q=python&page=2                                 │
    │                                                                      │
    │    Host: localhost:8080\r\n                      ◄── ignored         │
    │    User-Agent: curl/8.4.0\r\n                    ◄── ignored         │
    │    \r\n                                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING ALGORITHM
=============================================================================

    raw bytes
        │
        ├──► 1. decode UTF-8 (strict)          fail → INVALID_ENCODING
        │
        ├──► 2. next_token() × 3               fail → INVALID_REQUEST
        │       method, path, protocol
        │
        ├──► 3. protocol == "HTTP/1.1"?        fail → INVALID_PROTOCOL
        │
        ├──► 4. Method.from_token()            fail → INVALID_METHOD
        │
        ├──► 5. split path at first "?"
        │       suffix → QueryString.parse()   (never fails)
        │
        └──► 6. Request(method, path, query_string)

Each step short-circuits: the first failure is the one reported.

=============================================================================
THE TOKENIZER
=============================================================================

next_token() is the only primitive the request-line parser needs. It
finds the first SPACE or CARRIAGE RETURN and splits around it:

    next_token("GET / HTTP/1.1\r\n")
        → ("GET", "/ HTTP/1.1\r\n")

    next_token("/ HTTP/1.1\r\n")
        → ("/", "HTTP/1.1\r\n")

    next_token("HTTP/1.1\r\n")
        → ("HTTP/1.1", "\n")

The remainder is NOT trimmed. With two spaces between tokens, the second
token starts with a space:

    next_token("GET  /")  → ("GET", " /")

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .method import Method, MethodError
from .query_string import QueryString


# The only protocol version this server speaks.
SUPPORTED_PROTOCOL = "HTTP/1.1"

# Characters that end a request-line token.
TOKEN_DELIMITERS = (" ", "\r")


class ParseErrorKind(Enum):
    """
    Why a request could not be parsed.

    The value of each member is the fixed human-readable message.
    """

    INVALID_REQUEST = "Invalid Request"     # Request line is missing a token
    INVALID_ENCODING = "Invalid Encoding"   # Bytes are not valid UTF-8
    INVALID_PROTOCOL = "Invalid Protocol"   # Anything other than HTTP/1.1
    INVALID_METHOD = "Invalid Method"       # Unknown method token

    @property
    def message(self) -> str:
        return self.value


class ParseError(Exception):
    """
    Raised when a raw request cannot be turned into a Request.

    Carries a ParseErrorKind so callers can branch on the failure without
    matching on message strings:

        try:
            request = parse_request(data)
        except ParseError as e:
            if e.kind is ParseErrorKind.INVALID_PROTOCOL:
                ...

    Parse errors are terminal for the exchange. Nothing retries them.
    """

    def __init__(self, kind: ParseErrorKind):
        super().__init__(kind.message)
        self.kind = kind


def next_token(text: str) -> Optional[Tuple[str, str]]:
    """
    Split off the first token of a request line.

    Args:
        text: Text to scan.

    Returns:
        (token, rest) where token is everything before the first space or
        "\\r" and rest is everything after that single delimiter character.
        None if the text contains neither delimiter.
    """
    for i, char in enumerate(text):
        if char in TOKEN_DELIMITERS:
            return text[:i], text[i + 1:]
    return None


@dataclass(frozen=True)
class Request:
    """
    A parsed HTTP request line.

    Attributes:
        method:        The request method.
        path:          Request path WITHOUT the query string.
                       "/search" not "/search?q=python"
        query_string:  Parsed query string, or None if the path had no "?".

    A Request is built once per socket read, handed to the handler, and
    thrown away after the response is written.
    """

    method: Method
    path: str
    query_string: Optional[QueryString] = None

    @classmethod
    def from_bytes(cls, data: bytes) -> "Request":
        """
        Parse raw request bytes into a Request.

        Args:
            data: Bytes from a single socket read.

        Returns:
            The parsed Request.

        Raises:
            ParseError: If the bytes are not a valid HTTP/1.1 request line.
        """
        # =====================================================================
        # STEP 1: Decode
        # =====================================================================
        # Strict decoding: a single invalid byte fails the whole request,
        # before we look at any token.
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(ParseErrorKind.INVALID_ENCODING) from e

        # =====================================================================
        # STEP 2: Split the request line into its three tokens
        # =====================================================================
        # "GET /path?query HTTP/1.1\r\n..."
        #
        method_token, rest = _require_token(text)
        path_token, rest = _require_token(rest)
        protocol, _ = _require_token(rest)

        # =====================================================================
        # STEP 3: Validate protocol
        # =====================================================================
        if protocol != SUPPORTED_PROTOCOL:
            raise ParseError(ParseErrorKind.INVALID_PROTOCOL)

        # =====================================================================
        # STEP 4: Parse method
        # =====================================================================
        try:
            method = Method.from_token(method_token)
        except MethodError as e:
            raise ParseError(ParseErrorKind.INVALID_METHOD) from e

        # =====================================================================
        # STEP 5: Separate path from query string
        # =====================================================================
        # "/search?q=python" → path "/search", query "q=python"
        # Only the FIRST "?" splits; later ones belong to the query.
        #
        path, sep, query = path_token.partition("?")
        query_string = QueryString.parse(query) if sep else None

        return cls(method=method, path=path, query_string=query_string)


def _require_token(text: str) -> Tuple[str, str]:
    """next_token() that raises INVALID_REQUEST instead of returning None."""
    token = next_token(text)
    if token is None:
        raise ParseError(ParseErrorKind.INVALID_REQUEST)
    return token


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(data: bytes) -> Request:
    """
    Parse raw request bytes into a Request.

    Shorthand for Request.from_bytes(data).

    Example:
        request = parse_request(b"GET /p?x=1 HTTP/1.1\\r\\n\\r\\n")
        request.method         # Method.GET
        request.path           # "/p"
        request.query_string   # QueryString({'x': '1'})
    """
    return Request.from_bytes(data)

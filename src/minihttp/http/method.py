"""
=============================================================================
HTTP METHODS
=============================================================================

The nine request methods defined by RFC 7231 and RFC 5789.

    ┌──────────┬────────────┬──────────────────────────────────────────┐
    │  Method  │ Idempotent │ Description                              │
    ├──────────┼────────────┼──────────────────────────────────────────┤
    │  GET     │    Yes     │ Retrieve resource                        │
    │  POST    │    No      │ Create resource / submit data            │
    │  PUT     │    Yes     │ Replace entire resource                  │
    │  DELETE  │    Yes     │ Delete resource                          │
    │  HEAD    │    Yes     │ GET without body (metadata only)         │
    │  CONNECT │    No      │ Establish tunnel (HTTPS proxy)           │
    │  OPTIONS │    Yes     │ Get allowed methods (CORS preflight)     │
    │  TRACE   │    Yes     │ Echo request (debugging)                 │
    │  PATCH   │    No      │ Partial update                           │
    └──────────┴────────────┴──────────────────────────────────────────┘

Every method is RECOGNIZED by the parser, so "POST /x HTTP/1.1" is a
valid request. Whether a method is actually served is up to the handler.

Matching is case-insensitive: "get", "Get" and "GET" all parse to
Method.GET. Anything else (including an empty token) raises MethodError.

=============================================================================
"""

from enum import Enum


class MethodError(Exception):
    """Raised when a request-line token is not a known HTTP method."""

    MESSAGE = "Invalid Method"

    def __init__(self, token: str = ""):
        super().__init__(self.MESSAGE)
        self.token = token  # The offending token, kept for logging


class Method(Enum):
    """An HTTP request method. Members carry no payload."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    PATCH = "PATCH"

    @classmethod
    def from_token(cls, token: str) -> "Method":
        """
        Parse a method token from the request line.

        Args:
            token: The first whitespace-delimited token of the request line.

        Returns:
            The matching Method member.

        Raises:
            MethodError: If the token is not one of the nine known methods.

        Example:
            Method.from_token("get")     # Method.GET
            Method.from_token("FETCH")   # raises MethodError
            Method.from_token("poſt")    # raises MethodError (not ASCII)
        """
        # ASCII only: str.upper() would map "ſ" to "S" and "ı" to "I"
        if not token.isascii():
            raise MethodError(token)
        method = cls.__members__.get(token.upper())
        if method is None:
            raise MethodError(token)
        return method

    def __str__(self) -> str:
        return self.value

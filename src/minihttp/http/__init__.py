"""
=============================================================================
HTTP PROTOCOL MODULE
=============================================================================

Everything that knows about the HTTP wire format:

    method.py         Method enum, case-insensitive parsing
    query_string.py   Multi-valued query string mapping
    request.py        Request-line tokenizer and parser
    response.py       Response with streaming serialization
    status_codes.py   StatusCode enum and reason phrases

Nothing in here touches sockets. The server passes bytes in and gets a
Request out, and hands a stream to Response.send().

=============================================================================
"""

from .method import Method, MethodError
from .query_string import QueryString, QueryValue
from .request import (
    Request,
    ParseError,
    ParseErrorKind,
    next_token,
    parse_request,
)
from .response import Response
from .status_codes import StatusCode

__all__ = [
    # Methods
    "Method",
    "MethodError",

    # Query strings
    "QueryString",
    "QueryValue",

    # Request parsing
    "Request",
    "ParseError",
    "ParseErrorKind",
    "next_token",
    "parse_request",

    # Responses
    "Response",
    "StatusCode",
]

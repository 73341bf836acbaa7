"""
=============================================================================
QUERY STRING
=============================================================================

Parses the part of a request path after "?" into a multi-valued mapping.

    GET /search?q=python&tag=web&tag=http&debug HTTP/1.1
                ───────────────────┬────────────────
                                   │
                                   ▼
          {"q": "python", "tag": ["web", "http"], "debug": ""}

=============================================================================
SINGLE VS MULTIPLE VALUES
=============================================================================

A key seen once maps to a plain string. A key seen again is promoted to
a list, and every later occurrence is appended in arrival order:

    "x=1"            → {"x": "1"}
    "x=1&x=2"        → {"x": ["1", "2"]}
    "x=1&x=2&x=3"    → {"x": ["1", "2", "3"]}

Callers that don't care which shape they get can use get_list(), which
always returns a list.

=============================================================================
PARSING NEVER FAILS
=============================================================================

Parsing never fails. Every byte sequence splits into segments somehow:

    "flag"       → key "flag", value ""      (no "=")
    "a=b=c"      → key "a",    value "b=c"   (split on FIRST "=")
    ""           → key "",     value ""      (empty segment)

Values are kept exactly as they appear in the URL. No percent-decoding
and no "+" → space translation is applied.

=============================================================================
"""

from collections.abc import Mapping
from typing import Dict, Iterator, List, Optional, Union


# A query value is either a single string or the ordered list of strings
# collected for a repeated key.
QueryValue = Union[str, List[str]]


class QueryString(Mapping):
    """
    Read-only mapping of query keys to single or multiple values.

    Usage:
        qs = QueryString.parse("x=1&x=2&y=3")
        qs["y"]               # "3"
        qs["x"]               # ["1", "2"]
        qs.get_list("y")      # ["3"]
        "x" in qs             # True
        str(qs)               # "x&y"
    """

    def __init__(self, data: Optional[Dict[str, QueryValue]] = None):
        self._data: Dict[str, QueryValue] = dict(data or {})

    @classmethod
    def parse(cls, text: str) -> "QueryString":
        """
        Parse a raw query string (without the leading "?").

        Args:
            text: Raw query string, e.g. "name=John&age=30".

        Returns:
            A new QueryString. This never raises.
        """
        data: Dict[str, QueryValue] = {}

        for segment in text.split("&"):
            key, sep, value = segment.partition("=")
            if not sep:
                # No "=": whole segment is the key, value is empty
                value = ""

            existing = data.get(key)
            if existing is None:
                data[key] = value
            elif isinstance(existing, list):
                existing.append(value)
            else:
                data[key] = [existing, value]

        return cls(data)

    # =========================================================================
    # MAPPING PROTOCOL
    # =========================================================================

    def __getitem__(self, key: str) -> QueryValue:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"QueryString({self._data!r})"

    def __str__(self) -> str:
        # Keys only, in first-seen order
        return "&".join(self._data)

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_list(self, key: str) -> List[str]:
        """
        Get every value for a key as a list.

        Returns an empty list if the key is missing. The returned list is a
        copy, so callers may modify it freely.

        Example:
            QueryString.parse("id=1&id=2").get_list("id")  # ["1", "2"]
            QueryString.parse("id=1").get_list("id")       # ["1"]
        """
        value = self._data.get(key)
        if value is None:
            return []
        if isinstance(value, list):
            return list(value)
        return [value]

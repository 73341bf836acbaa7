"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the server and the CLI.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m minihttp --port 3000                            │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── MINIHTTP_PORT=3000 python -m minihttp                     │
    │                                                                      │
    │   3. Defaults in ServerConfig                                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import logging
import os
from dataclasses import dataclass


# One read from the socket is one request. Anything past this many bytes
# is never seen by the parser.
DEFAULT_BUFFER_SIZE = 1024

# The smallest buffer that still fits "GET / HTTP/1.1\r\n".
MIN_BUFFER_SIZE = 16

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, buffer_size

    CONTENT
    - public_path

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces (containers)
    """

    port: int = 8080
    """The port number to listen on."""

    buffer_size: int = DEFAULT_BUFFER_SIZE
    """
    Size of the single read per connection, in bytes.
    This is also the maximum request size: longer requests are truncated.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    public_path: str = "public"
    """Directory the website handler serves files from."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @property
    def addr(self) -> str:
        """Get the bind address as "host:port"."""
        return f"{self.host}:{self.port}"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        MINIHTTP_HOST         Server host (default: 127.0.0.1)
        MINIHTTP_PORT         Server port (default: 8080)
        MINIHTTP_BUFFER_SIZE  Read buffer in bytes (default: 1024)
        PUBLIC_PATH           Directory to serve (default: ./public)
        MINIHTTP_LOG_LEVEL    Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("MINIHTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("MINIHTTP_PORT", "8080")),
            buffer_size=int(os.getenv("MINIHTTP_BUFFER_SIZE", str(DEFAULT_BUFFER_SIZE))),
            public_path=os.getenv("PUBLIC_PATH", "public"),
            log_level=os.getenv("MINIHTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad value fails immediately instead of
        on the first request.

        Raises:
            ValueError: If any value is out of range.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < MIN_BUFFER_SIZE:
            raise ValueError(f"buffer_size must be >= {MIN_BUFFER_SIZE}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")


def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the process.

    Installs a root handler with a timestamped format and sets the
    "minihttp" logger to the requested level.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("minihttp").setLevel(numeric_level)

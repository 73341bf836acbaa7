"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    # Serve ./public on 127.0.0.1:8080
    python -m minihttp

    # Custom address and directory
    python -m minihttp --host 0.0.0.0 --port 3000 --public-path ./site

    # Same, from the environment
    MINIHTTP_PORT=3000 PUBLIC_PATH=./site python -m minihttp

Command-line flags override environment variables, which override the
defaults in ServerConfig.

=============================================================================
"""

import argparse
import logging
import sys

from . import __version__
from .config import ServerConfig, setup_logging, LOG_LEVELS
from .handlers import WebsiteHandler
from .server import Server


logger = logging.getLogger("minihttp")


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Create the argument parser, with defaults taken from the environment."""
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal single-threaded HTTP/1.1 file server",
    )

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})",
    )
    parser.add_argument(
        "--public-path", "-d",
        default=defaults.public_path,
        help=f"Directory to serve files from (default: {defaults.public_path})",
    )
    parser.add_argument(
        "--buffer-size", "-b",
        type=int,
        default=defaults.buffer_size,
        help=f"Maximum request size in bytes (default: {defaults.buffer_size})",
    )
    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}",
    )

    return parser


def main(argv=None) -> int:
    """Parse arguments, build the server, and run it until interrupted."""
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid environment configuration: {e}", file=sys.stderr)
        return 1

    args = build_parser(defaults).parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        buffer_size=args.buffer_size,
        public_path=args.public_path,
        log_level=args.log_level,
    )

    try:
        config.validate()
        setup_logging(config.log_level)

        handler = WebsiteHandler(config.public_path)
        logger.info(f"Serving files from: {handler.public_path}")

        Server(config.addr, buffer_size=config.buffer_size).run(handler)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

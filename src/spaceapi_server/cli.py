"""CLI for the status server.

Usage:
    spaceapi-server [--config config.yml] [--bind ADDR] [--port PORT]
"""

import argparse
import logging
import os
import sys

from spaceapi_server.config import (
    DEFAULT_CONFIG_FILE,
    ConfigError,
    ensure_api_key,
    load_space_config,
)
from spaceapi_server.httpd import Server, DEFAULT_PORT, DEFAULT_BIND

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spaceapi-server",
        description="Publish a space's open/closed status (SpaceAPI v14)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--config", "-c",
        default=os.environ.get("CONFIG_FILE", DEFAULT_CONFIG_FILE),
        help="Path to the space config file. Env: CONFIG_FILE",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=DEFAULT_PORT,
        help="Port to listen on",
    )
    parser.add_argument(
        "--bind", "-b",
        default=DEFAULT_BIND,
        help="Address to bind to",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def _create_server(args) -> Server:
    """Create a Server instance from parsed arguments.

    Returns:
        Server instance (not yet started).

    Raises:
        SystemExit: On configuration errors.
    """
    try:
        config = load_space_config(args.config)
        config = ensure_api_key(config)
    except ConfigError as e:
        logger.error("Invalid config: %s", e)
        sys.exit(1)

    return Server(config=config, bind=args.bind, port=args.port)


def main(argv=None):
    """CLI entry point for the server.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _build_parser().parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    server = _create_server(args)

    try:
        server.start()
    except RuntimeError as e:
        logger.error("Failed to start server: %s", e)
        return 1

    host, port = server.address
    print(f"\nServer running at http://{host}:{port}")
    print("\nPress Ctrl+C to stop...")

    server.serve_forever()
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""CLI for changing and querying the space status.

Usage:
    spaceapi-client [--url URL] [--api-key KEY] <open|close|is-open|status>
"""

import argparse
import json
import logging
import os
import sys

from spaceapi_client.client import (
    AuthRejectedError,
    ClientBuildError,
    ClientBuilder,
    ClientError,
    get_version,
)

logger = logging.getLogger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_CLIENT_ERROR = 1  # Missing settings, rejected API key
EXIT_SERVER_ERROR = 2  # Network, HTTP or decode error

COMMANDS = {
    "open": "Mark the space as open",
    "close": "Mark the space as closed",
    "is-open": "Print 'open' or 'closed'",
    "status": "Print the published status document",
}


def get_config_from_env() -> dict:
    """Get configuration from environment variables.

    Returns:
        Dict with url, api_key (if set)
    """
    config = {}

    if url := os.environ.get("SPACEAPI_URL"):
        config["url"] = url

    if api_key := os.environ.get("API_KEY"):
        config["api_key"] = api_key

    return config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spaceapi-client",
        description="A client for changing space status",
        epilog="Commands: " + ", ".join(COMMANDS),
    )
    parser.add_argument(
        "--url", "-u",
        help="Server base URL. Env: SPACEAPI_URL",
    )
    parser.add_argument(
        "--api-key", "-k",
        help="Admin API key. Env: API_KEY",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {get_version()}",
    )
    parser.add_argument("command", nargs="?", help="Command to run")
    return parser


def _run_command(client, command: str) -> int:
    if command == "open":
        client.open()
    elif command == "close":
        client.close()
    elif command == "is-open":
        print("open" if client.is_open() else "closed")
    elif command == "status":
        print(json.dumps(client.status().to_dict(), indent=2))
    return EXIT_SUCCESS


def main(argv=None) -> int:
    """CLI entry point.

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
        format="%(message)s",  # Simple format for CLI output
    )

    if args.command is None:
        print("Specify one command")
        print(f"Available commands: {', '.join(COMMANDS)}")
        return EXIT_SUCCESS

    if args.command not in COMMANDS:
        print(f"Unknown command `{args.command}`")
        print(f"Available commands: {', '.join(COMMANDS)}")
        return EXIT_SUCCESS

    # Merge CLI args with env vars (CLI takes precedence)
    env_config = get_config_from_env()
    url = args.url or env_config.get("url")
    api_key = args.api_key or env_config.get("api_key")

    try:
        client = ClientBuilder().base_url(url).api_key(api_key).build()
    except ClientBuildError as e:
        logger.error("Error: can't build client: %s (set --url/SPACEAPI_URL and --api-key/API_KEY)", e.message)
        return EXIT_CLIENT_ERROR

    try:
        return _run_command(client, args.command)
    except AuthRejectedError as e:
        logger.error("Error: %s - %s", e.code, e.message)
        return EXIT_CLIENT_ERROR
    except ClientError as e:
        logger.error("Error: %s failed: %s - %s", args.command, e.code, e.message)
        return EXIT_SERVER_ERROR


if __name__ == "__main__":
    sys.exit(main())

"""
=============================================================================
QOTD SERVER CLI ENTRY POINT
=============================================================================

    # Serve random lines from a file
    python -m qotd file quotes.txt

    # Run a command for every quote (arguments are passed through as-is)
    python -m qotd cmd fortune -s

    # Unprivileged port, verbose logs
    python -m qotd --port 1717 --log-level DEBUG file quotes.txt

Global options must come BEFORE the provider: everything after it belongs
to the provider, so `cmd fortune --port 3` hands `--port 3` to fortune.

Exit status:
    0   Served until stopped, or printed usage (nothing was started)
    1   Configuration or bind failure
=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig, LOG_LEVELS
from .errors import BindError, ConfigError, UsageError
from .quotes import load_source
from .server import QOTDServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qotd",
        description="Quote of the Day (RFC 865) server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
providers:
  file PATH             serve a random non-blank line of PATH
  cmd CMD [ARGS...]     serve the stdout of CMD, run once per client
        """,
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1, env: QOTD_HOST)",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 17, env: QOTD_PORT)",
    )

    parser.add_argument(
        "--write-timeout",
        type=float,
        default=None,
        help="Give up on a client after this many seconds (default: never)",
    )

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: WARNING, env: QOTD_LOG_LEVEL)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"qotd {__version__}",
    )

    parser.add_argument("provider", nargs="?", help="file or cmd")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="provider arguments")

    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then CLI overrides."""
    config = ServerConfig.from_env()
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.write_timeout is not None:
        config.write_timeout = args.write_timeout
    if args.log_level is not None:
        config.log_level = args.log_level
    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        source = load_source(args.provider, args.args)
    except UsageError as e:
        print(e.usage or str(e))
        return 0
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    server = QOTDServer(source, config)

    try:
        server.run()
    except BindError as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

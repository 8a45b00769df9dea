"""
Main CLI entry point for walletchat.
"""

import argparse
import os
import sys

from walletchat import __version__

from .._exceptions import WalletChatError
from ..client import WalletChat
from .registry import registry
from .util import configure_logging, graceful_main


def build_parser() -> argparse.ArgumentParser:
    registry.auto_discover_commands()

    parser = argparse.ArgumentParser(
        prog="walletchat",
        description="walletchat - chat with your wallet assistant",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--base-url", help="Chat API base URL (or WALLETCHAT_BASE_URL)")
    parser.add_argument("--api-key", help="API key (or WALLETCHAT_API_KEY)")
    parser.add_argument("--user-id", help="User id sent with messages (or WALLETCHAT_USER_ID)")
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Use local development server (port from WALLETCHAT_PORT, default 3000)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    for command in registry.get_primary_commands():
        subparser = subparsers.add_parser(
            command.name, aliases=command.aliases, help=command.description
        )
        command.add_arguments(subparser)
    return parser


def _real_main(argv: list[str]) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args.verbose)

    base_url = args.base_url
    if args.dev:
        dev_port = os.getenv("WALLETCHAT_PORT", "3000")
        base_url = f"http://127.0.0.1:{dev_port}/api"

    try:
        command = registry.get_command(args.command)
    except KeyError:
        print(f"❌ Unknown command: {args.command}")
        return 1

    try:
        client = WalletChat(base_url=base_url, api_key=args.api_key, user_id=args.user_id)
    except WalletChatError as e:
        print(f"❌ {e}")
        return 1

    try:
        return command.execute(args, client)
    except WalletChatError as e:
        print(f"❌ Command execution failed: {e}")
        return 1


def main() -> None:
    """Main CLI entry point with graceful interrupt handling."""
    code = graceful_main(_real_main, sys.argv[1:])
    raise SystemExit(code)


if __name__ == "__main__":
    main()

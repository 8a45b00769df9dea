"""
CLI helpers: logging setup, prompts and Ctrl-C/SIGTERM handling.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
import signal
import sys
from typing import Any

CANCELLED_EXIT = 130  # POSIX: 128 + SIGINT (2)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def print_cancelled(msg: str = "✖ Cancelled by user") -> None:
    """Print cancellation message to stderr."""
    sys.stderr.write("\n" + msg + "\n")
    sys.stderr.flush()


def configure_logging(verbose: bool = False) -> None:
    """Route library logs to stderr; debug level with --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def read_message(label: str = "> ") -> str | None:
    """
    Read one chat message from stdin.

    Returns:
        The stripped line, or None at end of input
    """
    try:
        return input(label).strip()
    except EOFError:
        return None


def graceful_main(fn: Callable[[list[str]], int], argv: list[str]) -> int:
    """
    Run fn(argv), turning Ctrl-C and SIGTERM into exit code 130.

    Args:
        fn: Function to run that takes argv and returns exit code
        argv: Command line arguments
    """

    def _term(_signum: int, _frame: Any) -> None:
        raise KeyboardInterrupt()

    old_term = signal.getsignal(signal.SIGTERM)
    signal.signal(signal.SIGTERM, _term)
    try:
        return int(fn(argv) or 0)
    except KeyboardInterrupt:
        print_cancelled()
        return CANCELLED_EXIT
    finally:
        signal.signal(signal.SIGTERM, old_term)

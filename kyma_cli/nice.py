"""Coloured output for notable messages."""

from __future__ import annotations

import sys

from termcolor import colored


def print_kyma() -> None:
    """Print the word Kyma in its identity colour, without a newline."""
    sys.stdout.write(colored("Kyma", "cyan"))
    sys.stdout.flush()


def print_important(s: str) -> None:
    """Print a line highlighted in bright yellow."""
    print(colored(s, "yellow", attrs=["bold"]))


def print_importantf(format: str, *args) -> None:
    """Format a message and print it highlighted."""
    print_important(format % args if args else format)
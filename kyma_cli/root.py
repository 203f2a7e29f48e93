"""User confirmation prompts and privilege detection."""

from __future__ import annotations

import os
import sys

_YES = {"Yes", "Y", "yes", "y"}
_NO = {"no", "n"}


def prompt_user() -> bool:
    """Ask the user for a yes/no answer until a known one is given.

    Returns False when input ends or an empty answer is given.
    """
    while True:
        sys.stdout.write("Type [Y/n]: ")
        sys.stdout.flush()
        line = sys.stdin.readline()
        words = line.split()
        if not words:
            return False
        answer = words[0]
        if answer in _YES:
            return True
        if answer in _NO:
            return False


def is_with_sudo() -> bool:
    """Tell whether the process runs with administrator privileges."""
    if sys.platform.startswith("win"):
        try:
            with open("\\\\.\\PHYSICALDRIVE0", "rb"):
                return True
        except OSError:
            return False
    return os.environ.get("SUDO_UID", "") != ""
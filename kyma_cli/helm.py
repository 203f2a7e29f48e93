"""Locating the helm configuration folder."""

from __future__ import annotations

import os
import subprocess
from typing import Sequence


def home(command: Sequence[str] = ("helm", "home")) -> str:
    """Return the folder printed by ``command``, creating it if missing; "" if the command fails."""
    try:
        completed = subprocess.run(
            list(command), stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=False
        )
    except OSError:
        return ""
    if completed.returncode != 0:
        return ""
    helm_home = completed.stdout.decode("utf-8", errors="replace").replace("\n", "")
    os.makedirs(helm_home, mode=0o700, exist_ok=True)
    return helm_home
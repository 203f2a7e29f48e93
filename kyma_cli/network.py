"""Network helpers."""

from __future__ import annotations

import socket


def get_available_port() -> int:
    """Return a TCP port that is currently free on this machine."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("", 0))
        return sock.getsockname()[1]
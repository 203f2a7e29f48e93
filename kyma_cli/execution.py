"""Running external programs and collecting their combined output."""

from __future__ import annotations

import subprocess


class CommandError(RuntimeError):
    """Raised when an external command cannot be started or exits with an error."""


def run_cmd(command: str, *args: str) -> str:
    """Run ``command`` with ``args`` and return its combined output without single quotes."""
    shown = f"{command} [{' '.join(args)}]"
    try:
        completed = subprocess.run(
            [command, *args], stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=False
        )
    except OSError as err:
        reason = (
            "executable file not found in $PATH"
            if isinstance(err, FileNotFoundError)
            else err.strerror or str(err)
        )
        raise CommandError(
            f"Executing command '{shown}' failed with output '' "
            f"and error message 'exec: \"{command}\": {reason}'"
        ) from err

    output = completed.stdout.decode("utf-8", errors="replace")
    code = completed.returncode
    if code:
        reason = f"signal: {-code}" if code < 0 else f"exit status {code}"
        raise CommandError(
            f"Executing command '{shown}' failed with output '{output}' "
            f"and error message '{reason}'"
        )
    return output.replace("'", "")
"""Running minikube commands and reading its configuration."""

from __future__ import annotations

import os
import re
import subprocess
from contextlib import contextmanager
from typing import Iterator

from packaging.version import Version

from kyma_cli.execution import CommandError

MINIKUBE_VERSION = "1.3.1"

_VERSION_PATTERN = re.compile(r"minikube version: v(.*)")


def run_cmd(verbose: bool, profile: str, *args: str) -> str:
    """Run minikube, optionally for a profile, and return its unquoted output."""
    argv = ["--profile", profile] if profile else []
    argv.extend(args)
    shown = " ".join(argv)
    try:
        completed = subprocess.run(
            ["minikube", *argv],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
    except OSError as err:
        output = ""
        if isinstance(err, FileNotFoundError):
            reason = 'exec: "minikube": executable file not found in $PATH'
        else:
            reason = f'exec: "minikube": {err.strerror or err}'
        cause: BaseException | None = err
    else:
        output = (completed.stdout or b"").decode("utf-8", errors="replace")
        if completed.returncode == 0:
            if verbose:
                print(f"\nExecuted command:\n  minikube {shown}\nwith output:\n  {output}\n", end="")
            return output.replace("'", "")
        if completed.returncode < 0:
            reason = f"signal: {-completed.returncode}"
        else:
            reason = f"exit status {completed.returncode}"
        cause = None

    if verbose:
        print(
            f"\nExecuted command:\n  minikube {shown}\nwith output:\n  {output}"
            f"\nand error:\n  {reason}\n",
            end="",
        )
    error = CommandError(
        f"Executing the 'minikube {shown}' command with output '{output}' "
        f"and error message '{reason}' failed"
    )
    error.output = output.replace("'", "")
    raise error from cause


def _is_supported(version: Version) -> bool:
    # Tilde range on the recommended version: same major and minor, at least its patch.
    recommended = Version(MINIKUBE_VERSION)
    if version.is_prerelease:
        return False
    upper = Version(f"{recommended.major}.{recommended.minor + 1}.0")
    return recommended <= version < upper


def check_version(verbose: bool) -> str:
    """Return a warning if the installed minikube version is unsupported, else ""."""
    version_text = run_cmd(verbose, "", "version")
    match = _VERSION_PATTERN.search(version_text)
    if match is None:
        raise ValueError(f"Could not read the minikube version from '{version_text}'")
    raw = match.group(1).strip()
    version = Version(raw)
    if _is_supported(version):
        return ""
    return (
        f"You are using an unsupported Minikube version '{raw}'. This may not work. "
        f"The recommended Minikube version is '{MINIKUBE_VERSION}'"
    )


def parse_docker_env(output: str) -> dict[str, str]:
    """Read the variables exported by ``minikube docker-env`` output."""
    environment: dict[str, str] = {}
    for line in output.split("\n"):
        if not line.startswith("export"):
            continue
        parts = line.split(" ", 1)
        if len(parts) < 2 or "=" not in parts[1]:
            raise ValueError(f"Malformed docker-env line: '{line}'")
        key, value = parts[1].split("=", 1)
        environment[key] = value.strip('"')
    return environment


@contextmanager
def docker_environment(verbose: bool, profile: str) -> Iterator[dict[str, str]]:
    """Set minikube's Docker environment for the duration of the block.

    Yields the variables that were set; the previous values are restored on exit.
    """
    environment = parse_docker_env(run_cmd(verbose, profile, "docker-env"))
    previous = {key: os.environ.get(key) for key in environment}
    try:
        os.environ.update(environment)
        yield environment
    finally:
        for key, value in previous.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
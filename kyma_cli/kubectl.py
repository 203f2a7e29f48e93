"""Running kubectl commands."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import yaml

from kyma_cli.execution import CommandError

KUBECTL_VERSION = "1.14.6"
SLEEP_SECONDS = 5


def _failure_reason(program: str, err: OSError) -> str:
    if isinstance(err, FileNotFoundError):
        return f'exec: "{program}": executable file not found in $PATH'
    return f'exec: "{program}": {err.strerror or err}'


def _execute(argv: list[str], input_text: str, verbose: bool, stdin: bytes | None = None) -> str:
    """Run ``argv`` and return its combined output without single quotes.

    On failure a :class:`CommandError` is raised whose ``output`` attribute
    holds the unquoted output gathered so far.
    """
    try:
        completed = subprocess.run(
            argv,
            input=stdin,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
    except OSError as err:
        output = ""
        reason = _failure_reason(argv[0], err)
        cause: BaseException | None = err
    else:
        output = (completed.stdout or b"").decode("utf-8", errors="replace")
        if completed.returncode == 0:
            if verbose:
                print(
                    f"\nExecuted command:\n  kubectl {input_text}\nwith output:\n  {output}\n",
                    end="",
                )
            return output.replace("'", "")
        if completed.returncode < 0:
            reason = f"signal: {-completed.returncode}"
        else:
            reason = f"exit status {completed.returncode}"
        cause = None

    if verbose:
        print(
            f"\nExecuted command:\n  kubectl {input_text}\nwith output:\n  {output}"
            f"\nand error:\n  {reason}\n",
            end="",
        )
    error = CommandError(
        f"Executing kubectl 'kubectl {input_text}' command  with output '{output}' "
        f"and error message '{reason}' failed"
    )
    error.output = output.replace("'", "")
    raise error from cause


def run_cmd(verbose: bool, *args: str) -> str:
    """Run kubectl with the given arguments and return its unquoted output."""
    return _execute(["kubectl", *args], " ".join(args), verbose)


def run_apply_cmd(resources: Iterable[Mapping[str, Any]], verbose: bool, kubeconfig: str) -> str:
    """Apply the given resources with ``kubectl apply -f -``, fed as YAML documents."""
    documents = [dict(resource) for resource in resources]
    payload = yaml.safe_dump_all(documents, default_flow_style=False).encode("utf-8")
    argv = ["kubectl", f"--kubeconfig={kubeconfig}", "apply", "-f", "-"]
    return _execute(argv, f"apply -f -{documents}", verbose, stdin=payload)


@dataclass
class KubectlWrapper:
    """Runs kubectl with a fixed verbosity and kubeconfig."""

    verbose: bool = False
    kubeconfig: str = ""

    def run_cmd(self, *args: str) -> str:
        if self.kubeconfig:
            args = (*args, f"--kubeconfig={self.kubeconfig}")
        return run_cmd(self.verbose, *args)

    def run_apply_cmd(self, resources: Iterable[Mapping[str, Any]]) -> str:
        return run_apply_cmd(resources, self.verbose, self.kubeconfig)
import subprocess
from unittest import mock

import pytest
import yaml

from kyma_cli import kubectl
from kyma_cli.execution import CommandError
from kyma_cli.kubectl import KubectlWrapper


def _completed(stdout=b"", returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout)


def test_run_cmd_passes_arguments_and_strips_quotes():
    with mock.patch("subprocess.run", return_value=_completed(b"pod 'alpha'\n")) as run:
        result = kubectl.run_cmd(False, "get", "pods")
    assert run.call_args.args[0] == ["kubectl", "get", "pods"]
    assert result == "pod alpha\n"


def test_run_cmd_failure_raises_with_output():
    with mock.patch("subprocess.run", return_value=_completed(b"it's broken", 1)):
        with pytest.raises(CommandError, match="exit status 1") as info:
            kubectl.run_cmd(False, "get", "pods")
    assert "kubectl get pods" in str(info.value)
    assert info.value.output == "its broken"


def test_run_cmd_missing_executable():
    with mock.patch("subprocess.run", side_effect=FileNotFoundError()):
        with pytest.raises(CommandError, match="executable file not found"):
            kubectl.run_cmd(False, "version")


def test_run_apply_cmd_feeds_yaml_documents():
    resources = [
        {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": "one"}},
        {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": "two"}},
    ]
    with mock.patch("subprocess.run", return_value=_completed(b"applied")) as run:
        result = kubectl.run_apply_cmd(resources, False, "/tmp/config")
    argv = run.call_args.args[0]
    assert argv == ["kubectl", "--kubeconfig=/tmp/config", "apply", "-f", "-"]
    fed = run.call_args.kwargs["input"].decode("utf-8")
    assert list(yaml.safe_load_all(fed)) == resources
    assert result == "applied"


def test_wrapper_appends_kubeconfig():
    wrapper = KubectlWrapper(verbose=False, kubeconfig="/tmp/config")
    with mock.patch("subprocess.run", return_value=_completed(b"pod 'a'")) as run:
        result = wrapper.run_cmd("get", "pods")
    assert run.call_args.args[0] == ["kubectl", "get", "pods", "--kubeconfig=/tmp/config"]
    assert result == "pod a"


def test_wrapper_without_kubeconfig_keeps_arguments():
    wrapper = KubectlWrapper()
    with mock.patch("subprocess.run", return_value=_completed(b"listed")) as run:
        result = wrapper.run_cmd("get", "pods")
    assert run.call_args.args[0] == ["kubectl", "get", "pods"]
    assert result == "listed"


def test_wrapper_apply_uses_kubeconfig():
    wrapper = KubectlWrapper(kubeconfig="/tmp/config")
    with mock.patch("subprocess.run", return_value=_completed(b"namespace created")) as run:
        result = wrapper.run_apply_cmd([{"kind": "Namespace"}])
    assert "--kubeconfig=/tmp/config" in run.call_args.args[0]
    assert result == "namespace created"


def test_verbose_prints_executed_command(capsys):
    with mock.patch("subprocess.run", return_value=_completed(b"done")):
        kubectl.run_cmd(True, "get", "nodes")
    out = capsys.readouterr().out
    assert "Executed command:" in out
    assert "kubectl get nodes" in out
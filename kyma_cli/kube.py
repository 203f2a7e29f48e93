"""Kubernetes access with Kyma-specific helpers."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from kyma_cli import octopus
from kyma_cli.kubeconfig import RestConfig, _http_session, load_kubeconfig

DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_WAIT_SLEEP = 3.0


class PodPhase(str, Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


class NotFoundError(LookupError):
    """Raised when a requested Kubernetes object does not exist."""


class _PodApi(Protocol):
    def get_pod(self, namespace: str, name: str) -> dict[str, Any]: ...

    def list_pods(self, namespace: str, label_selector: str) -> list[dict[str, Any]]: ...


class KubernetesApi:
    """Reads pods from the Kubernetes core API."""

    def __init__(self, config: RestConfig) -> None:
        self.config = config
        self._session = _http_session(config)
        self._base = f"{config.host.rstrip('/')}/api/v1"

    def _get(self, path: str, **params: str) -> Any:
        response = self._session.get(
            f"{self._base}/{path}", params=params or None, timeout=self.config.timeout
        )
        return response

    def get_pod(self, namespace: str, name: str) -> dict[str, Any]:
        """Return the pod as a mapping; raise NotFoundError if it does not exist."""
        response = self._get(f"namespaces/{namespace}/pods/{name}")
        if response.status_code == 404:
            raise NotFoundError(f'pods "{name}" not found')
        response.raise_for_status()
        return response.json()

    def list_pods(self, namespace: str, label_selector: str) -> list[dict[str, Any]]:
        """Return the pods of a namespace that match a label selector."""
        response = self._get(f"namespaces/{namespace}/pods", labelSelector=label_selector)
        response.raise_for_status()
        return response.json().get("items") or []


def _phase(pod: dict[str, Any]) -> str:
    return (pod.get("status") or {}).get("phase", "")


@dataclass
class KymaKube:
    """The Kubernetes API plus Kyma's test API and pod helpers."""

    static: _PodApi
    octopus: octopus.OctopusInterface | None = None
    config: RestConfig | None = None
    poll_interval: float = DEFAULT_WAIT_SLEEP

    def is_pod_deployed(self, namespace: str, name: str) -> bool:
        """Tell whether the pod exists in the namespace, whatever its status."""
        try:
            self.static.get_pod(namespace, name)
        except NotFoundError:
            return False
        return True

    def is_pod_deployed_by_label(self, namespace: str, label_name: str, label_value: str) -> bool:
        """Tell whether at least one pod in the namespace carries the label."""
        return len(self.static.list_pods(namespace, f"{label_name}={label_value}")) > 0

    def wait_pod_status(self, namespace: str, name: str, status: PodPhase | str) -> None:
        """Block until the pod reaches the given phase."""
        wanted = PodPhase(status).value
        while True:
            try:
                pod = self.static.get_pod(namespace, name)
            except NotFoundError:
                pod = {}
            if _phase(pod) == wanted:
                return
            time.sleep(self.poll_interval)

    def wait_pod_status_by_label(
        self, namespace: str, label_name: str, label_value: str, status: PodPhase | str
    ) -> None:
        """Block until every pod with the label is in the given phase."""
        wanted = PodPhase(status).value
        selector = f"{label_name}={label_value}"
        while True:
            pods = self.static.list_pods(namespace, selector)
            if all(_phase(pod) == wanted for pod in pods):
                return
            time.sleep(self.poll_interval)

    def wait_pods_gone(self, namespace: str, label_name: str, label_value: str) -> None:
        """Block until no pod with the label is left."""
        while self.is_pod_deployed_by_label(namespace, label_name, label_value):
            time.sleep(self.poll_interval)


def new_from_config(url: str, file: str) -> KymaKube:
    """Create a client from a kubeconfig with the default HTTP timeout."""
    return new_from_config_with_timeout(url, file, DEFAULT_HTTP_TIMEOUT)


def new_from_config_with_timeout(url: str, file: str, timeout: float) -> KymaKube:
    """Create a client from a kubeconfig with a custom HTTP timeout in seconds."""
    config = load_kubeconfig(url, file)
    config.timeout = timeout
    static = KubernetesApi(config)
    test_client = octopus.new_from_config(config)
    return KymaKube(static=static, octopus=test_client, config=config)
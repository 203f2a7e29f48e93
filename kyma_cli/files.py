"""Local files of the CLI, kept under the user's home folder."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

KYMA_FOLDER = ".kyma"


@dataclass
class Provider:
    """The infrastructure provider a cluster runs on."""

    type: str
    project_name: str


def kyma_home() -> Path:
    """Return the CLI's local folder, creating it if needed."""
    path = Path.home() / KYMA_FOLDER
    if not path.exists():
        path.mkdir(mode=0o700, parents=True)
    return path


def save(file_path: str | Path, content: bytes) -> None:
    """Write ``content`` to a path relative to the CLI's local folder."""
    target = kyma_home() / file_path
    try:
        target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        target.write_bytes(content)
    except OSError as err:
        raise OSError(f"Could not save file: {err}") from err


def load(file_path: str | Path) -> bytes:
    """Read the content of a path relative to the CLI's local folder."""
    return (kyma_home() / file_path).read_bytes()


def _state_path(cluster: Mapping[str, Any], provider: Provider) -> Path:
    return Path("clusters", provider.type, provider.project_name, cluster["name"], "state.json")


def save_cluster_state(cluster: Mapping[str, Any], provider: Provider) -> None:
    """Store a cluster's information as JSON under its provider and project."""
    try:
        data = json.dumps(dict(cluster)).encode("utf-8")
    except (TypeError, ValueError) as err:
        raise ValueError(f"Error marshaling cluster information: {err}") from err
    save(_state_path(cluster, provider), data)


def load_cluster_state(cluster: Mapping[str, Any], provider: Provider) -> dict[str, Any]:
    """Read back the stored information of a cluster."""
    try:
        data = load(_state_path(cluster, provider))
    except OSError as err:
        raise OSError(f"Error loading cluster information: {err}") from err
    return json.loads(data)
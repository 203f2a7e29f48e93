"""Loading and editing kubeconfig files."""

from __future__ import annotations

import base64
import binascii
import os
import shutil
import tempfile
import weakref
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import requests
import yaml

_SECTIONS = (("clusters", "cluster"), ("users", "user"), ("contexts", "context"))


class KubeconfigError(Exception):
    """Raised when a kubeconfig cannot be read, understood or written."""


@dataclass
class RestConfig:
    """Connection settings for talking to a Kubernetes API server."""

    host: str
    bearer_token: str = ""
    basic_auth: tuple[str, str] | None = None
    ca_file: str = ""
    ca_data: bytes = b""
    cert_file: str = ""
    cert_data: bytes = b""
    key_file: str = ""
    key_data: bytes = b""
    insecure: bool = False
    timeout: float | None = None
    user_agent: str = ""
    api_path: str = ""
    group_version: str = ""


@dataclass
class _Kubeconfig:
    clusters: dict[str, dict[str, Any]] = field(default_factory=dict)
    users: dict[str, dict[str, Any]] = field(default_factory=dict)
    contexts: dict[str, dict[str, Any]] = field(default_factory=dict)
    current_context: str = ""
    extra: dict[str, Any] = field(default_factory=dict)


def _parse(data: bytes | str) -> _Kubeconfig:
    try:
        raw = yaml.safe_load(data) or {}
    except yaml.YAMLError as err:
        raise KubeconfigError(f"could not parse kubeconfig: {err}") from err
    if not isinstance(raw, dict):
        raise KubeconfigError("kubeconfig must be a mapping")
    config = _Kubeconfig(current_context=raw.get("current-context") or "")
    for plural, singular in _SECTIONS:
        entries = getattr(config, plural)
        for item in raw.get(plural) or []:
            if not isinstance(item, dict) or not item.get("name"):
                raise KubeconfigError(f"invalid entry in {plural}: {item!r}")
            entries[item["name"]] = item.get(singular) or {}
    skip = {plural for plural, _ in _SECTIONS} | {"current-context"}
    config.extra = {key: value for key, value in raw.items() if key not in skip}
    return config


def _dump(config: _Kubeconfig) -> str:
    document: dict[str, Any] = {"apiVersion": "v1", "kind": "Config", "preferences": {}}
    document.update(config.extra)
    for plural, singular in _SECTIONS:
        document[plural] = [
            {"name": name, singular: entry} for name, entry in getattr(config, plural).items()
        ]
    document["current-context"] = config.current_context
    return yaml.safe_dump(document, default_flow_style=False, sort_keys=False)


def _starting_config(explicit: str) -> tuple[Path, _Kubeconfig]:
    """Read the explicit file, else the first existing KUBECONFIG entry, else ~/.kube/config."""
    if explicit:
        path = Path(explicit)
    else:
        candidates = [Path(p) for p in os.environ.get("KUBECONFIG", "").split(os.pathsep) if p]
        path = next((p for p in candidates if p.exists()), None) or (
            candidates[-1] if candidates else Path.home() / ".kube" / "config"
        )
    try:
        return path, _parse(path.read_bytes())
    except FileNotFoundError as err:
        if explicit:
            raise KubeconfigError(f"stat {explicit}: no such file or directory") from err
        return path, _Kubeconfig()
    except OSError as err:
        raise KubeconfigError(f"could not read kubeconfig {path}: {err}") from err


def _write(path: Path, config: _Kubeconfig) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        is_new = not path.exists()
        path.write_text(_dump(config), encoding="utf-8")
        if is_new:
            path.chmod(0o600)
    except OSError as err:
        raise KubeconfigError(f"could not write kubeconfig {path}: {err}") from err


def _decode(value: str | None, what: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True) if value else b""
    except (binascii.Error, ValueError) as err:
        raise KubeconfigError(f"invalid base64 in {what}: {err}") from err


def _resolve(base: Path, value: str | None) -> str:
    return str(base / value) if value else ""


def load_kubeconfig(url: str, file: str) -> RestConfig:
    """Build the client configuration from a kubeconfig; a non-empty ``url`` overrides the server."""
    path, config = _starting_config(file)
    base = path.parent
    context: dict[str, Any] = {}
    if config.current_context:
        if config.current_context not in config.contexts:
            raise KubeconfigError(
                f"context was not found for specified context: {config.current_context}"
            )
        context = config.contexts[config.current_context]
    cluster = config.clusters.get(context.get("cluster", ""), {})
    user = config.users.get(context.get("user", ""), {})

    server = url or cluster.get("server", "")
    if not server:
        raise KubeconfigError("invalid configuration: no configuration has been provided")

    token = user.get("token", "")
    token_file = _resolve(base, user.get("tokenFile"))
    if not token and token_file:
        try:
            token = Path(token_file).read_text(encoding="utf-8").strip()
        except OSError as err:
            raise KubeconfigError(f"could not read token file {token_file}: {err}") from err

    return RestConfig(
        host=server,
        bearer_token=token,
        basic_auth=(user["username"], user.get("password", "")) if user.get("username") else None,
        ca_file=_resolve(base, cluster.get("certificate-authority")),
        ca_data=_decode(cluster.get("certificate-authority-data"), "certificate-authority-data"),
        cert_file=_resolve(base, user.get("client-certificate")),
        cert_data=_decode(user.get("client-certificate-data"), "client-certificate-data"),
        key_file=_resolve(base, user.get("client-key")),
        key_data=_decode(user.get("client-key-data"), "client-key-data"),
        insecure=bool(cluster.get("insecure-skip-tls-verify", False)),
    )


def append_config(cfg: bytes | str, target: str) -> None:
    """Merge the contexts, clusters and users of ``cfg`` into the target and switch to its context."""
    source = _parse(cfg)
    path, config = _starting_config(target)
    config.contexts.update(source.contexts)
    config.clusters.update(source.clusters)
    config.users.update(source.users)
    config.current_context = source.current_context
    _write(path, config)


def remove_config(cfg: bytes | str, target: str) -> None:
    """Remove the contexts, clusters and users named in ``cfg`` from the target kubeconfig."""
    source = _parse(cfg)
    path, config = _starting_config(target)
    for plural, _ in _SECTIONS:
        entries = getattr(config, plural)
        for name in getattr(source, plural):
            entries.pop(name, None)
    config.current_context = ""
    _write(path, config)


def _http_session(config: RestConfig) -> requests.Session:
    """Create an HTTP session carrying the credentials and TLS settings of ``config``."""
    session = requests.Session()
    if config.bearer_token:
        session.headers["Authorization"] = f"Bearer {config.bearer_token}"
    elif config.basic_auth:
        session.auth = config.basic_auth
    if config.user_agent:
        session.headers["User-Agent"] = config.user_agent

    paths = {"ca.crt": config.ca_file, "client.crt": config.cert_file, "client.key": config.key_file}
    blobs = {
        name: data
        for name, data in (
            ("ca.crt", b"" if config.insecure else config.ca_data),
            ("client.crt", config.cert_data),
            ("client.key", config.key_data),
        )
        if data and not paths[name]
    }
    if blobs:
        workdir = tempfile.mkdtemp(prefix="kubeconfig-")
        weakref.finalize(session, shutil.rmtree, workdir, True)
        for name, data in blobs.items():
            target = Path(workdir) / name
            target.write_bytes(data)
            paths[name] = str(target)

    if config.insecure:
        session.verify = False
    elif paths["ca.crt"]:
        session.verify = paths["ca.crt"]
    if paths["client.crt"]:
        cert, key = paths["client.crt"], paths["client.key"]
        session.cert = (cert, key) if key else cert
    return session
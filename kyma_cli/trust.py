"""Managing the trust of the Kyma root certificate on the local machine."""

from __future__ import annotations

import base64
import binascii
import re
import sys
from abc import ABC, abstractmethod
from typing import Protocol

import requests

from kyma_cli import root
from kyma_cli.execution import CommandError, run_cmd
from kyma_cli.kube import KymaKube
from kyma_cli.kubeconfig import _http_session

_CONFIG_MAP_NAMESPACE = "kyma-installer"
_CONFIG_MAP_NAME = "net-global-overrides"
_CERT_KEY = "global.ingress.tlsCrt"

_DNS_PATTERN = re.compile(r"DNS:(.*)[\r\n]+")

_DOWNLOAD_STEP = (
    "Download the certificate: kubectl get configmap net-global-overrides -n kyma-installer "
    "-o jsonpath='{.data.global\\.ingress\\.tlsCrt}' | base64 --decode > kyma.crt\n"
)


class Informer(Protocol):
    """Receives progress messages of certificate management."""

    def log_info(self, msg: str) -> None: ...

    def log_infof(self, format: str, *args) -> None: ...


def _manual_import(instructions: str) -> str:
    return (
        "\nCould not import the Kyma root certificate. Follow the instructions to import it "
        f"manually:\n-----\n{instructions}-----\n"
    )


def _retrieval_failure(instructions: str) -> str:
    return (
        "\nCould not retrieve the Kyma root certificate. Follow the instructions to import it "
        f"manually:\n-----\n{instructions}-----\n"
    )


class Certifier(ABC):
    """Retrieves the Kyma root certificate and stores it as trusted on this machine."""

    _wrap_decode_errors = False

    def __init__(self, kube: KymaKube) -> None:
        self.kube = kube

    def _config_map_data(self) -> dict[str, str]:
        config = self.kube.config
        if config is None:
            raise RuntimeError("the Kubernetes client has no configuration")
        url = (
            f"{config.host.rstrip('/')}/api/v1/namespaces/{_CONFIG_MAP_NAMESPACE}"
            f"/configmaps/{_CONFIG_MAP_NAME}"
        )
        response = _http_session(config).get(url, timeout=config.timeout)
        response.raise_for_status()
        return response.json().get("data") or {}

    def certificate(self) -> bytes:
        """Return the decoded Kyma root certificate."""
        try:
            data = self._config_map_data()
        except (requests.RequestException, RuntimeError, ValueError) as err:
            raise RuntimeError(f"{_retrieval_failure(self.instructions())}: {err}") from err

        try:
            return base64.b64decode(data.get(_CERT_KEY, ""), validate=True)
        except (binascii.Error, ValueError) as err:
            if self._wrap_decode_errors:
                raise RuntimeError(
                    f"{_retrieval_failure(self.instructions())}: {err}"
                ) from err
            raise

    @abstractmethod
    def store_certificate(self, file: str, informer: Informer) -> None:
        """Import the certificate file into the operating system's trusted roots."""

    @abstractmethod
    def instructions(self) -> str:
        """Return instructions for storing the certificate by hand."""


class Keychain(Certifier):
    """Stores the certificate in the system keychain."""

    _wrap_decode_errors = True

    def store_certificate(self, file: str, informer: Informer) -> None:
        informer.log_info("Kyma wants to add its root certificate to the keychain.")
        if root.is_with_sudo():
            informer.log_info(
                "You're running CLI with sudo. CLI has to add the Kyma certificate to the "
                "keychain. Type 'y' to allow this action."
            )
            if not root.prompt_user():
                informer.log_info(_manual_import(self.instructions()))
                return

        try:
            run_cmd(
                "sudo", "security", "add-trusted-cert", "-d", "-r", "trustRoot",
                "-k", "/Library/Keychains/System.keychain", file,
            )
        except CommandError as err:
            raise CommandError(
                "\nCould not import the Kyma root certificate. Follow the instructions below "
                f"to import it manually:\n-----\n{self.instructions()}-----\n: {err}"
            ) from err

    def instructions(self) -> str:
        return (
            "1. " + _DOWNLOAD_STEP
            + "2. Import the certificate: sudo security add-trusted-cert -d -r trustRoot "
            "-k /Library/Keychains/System.keychain kyma.crt\n"
        )


class CertAuth(Certifier):
    """Stores the certificate among the system's CA certificates."""

    def store_certificate(self, file: str, informer: Informer) -> None:
        informer.log_info(
            "Kyma wants to add its root certificate to the trusted certificate store."
        )
        if root.is_with_sudo():
            informer.log_info(
                "You're running CLI with sudo. CLI has to add the Kyma certificate to the "
                "trusted certificate store. Type 'y' to allow this action."
            )
            if not root.prompt_user():
                informer.log_info(_manual_import(self.instructions()))
                return

        # The domain names the certificate file so that it can be told apart later.
        domain = cert_domain(file)
        failure = (
            "\nCould not import the Kyma certificates. Follow the instructions to import them "
            f"manually:\n-----\n{self.instructions()}-----\n"
        )
        try:
            run_cmd("sudo", "cp", file, f"/usr/local/share/ca-certificates/kyma-{domain}.crt")
            run_cmd("sudo", "update-ca-certificates")
        except CommandError as err:
            raise CommandError(f"{failure}: {err}") from err

    def instructions(self) -> str:
        return (
            "1. " + _DOWNLOAD_STEP
            + "2. Rename the certificate file: mv kyma.crt {NEW_CERT_NAME}\n"
            "3. Copy the certificate to the CA folder: sudo cp {NEW_CERT_NAME} "
            "/usr/local/share/ca-certificates/\n"
            "4. Update the certificate registry: sudo update-ca-certificates\n"
        )


class CertUtil(Certifier):
    """Stores the certificate in the Windows root store."""

    def store_certificate(self, file: str, informer: Informer) -> None:
        informer.log_info("Kyma wants to add its root certificate to the trusted certificates.")
        if root.is_with_sudo():
            informer.log_info(
                "You're running CLI with sudo. CLI has to add the Kyma root certificate to the "
                "trusted certificates. Type 'y' to allow this action."
            )
            if not root.prompt_user():
                informer.log_info(
                    "\nCould not import the Kyma root certificate, please follow the "
                    "instructions below to import it manually:\n-----\n"
                    f"{self.instructions()}-----\n"
                )
                return
            # Only possible with administrator rights already granted.
            run_cmd("certutil", "-addstore", "-f", "Root", file)
            return
        raise RuntimeError(
            "Could not import the Kyma root certificate. Follow the instructions to import "
            f"them manually:\n-----\n{self.instructions()}-----\n"
        )

    def instructions(self) -> str:
        return (
            "1. Open a terminal window with administrator rights.\n"
            "2. " + _DOWNLOAD_STEP
            + "3. Import the certificate: certutil -addstore -f Root kyma.crt\n"
        )


def new_certifier(kube: KymaKube) -> Certifier:
    """Return the certifier suited to the running operating system."""
    platform = sys.platform
    if platform == "darwin":
        return Keychain(kube)
    if platform.startswith("linux"):
        return CertAuth(kube)
    if platform.startswith("win"):
        return CertUtil(kube)
    raise RuntimeError(f"trusting certificates is not supported on '{platform}'")


def cert_domain(cert_file: str) -> str:
    """Return the DNS name written in the given certificate."""
    text = run_cmd("openssl", "x509", "-text", "-noout", "-in", cert_file)
    match = _DNS_PATTERN.search(text)
    if match is None:
        raise ValueError("Could not determine the certificate's DNS")
    return match.group(1).replace("'", "")
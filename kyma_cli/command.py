"""The shared state of a CLI command: its options, current step and clients."""

from __future__ import annotations

from dataclasses import dataclass, field

from kyma_cli.kube import KymaKube
from kyma_cli.kubectl import KubectlWrapper
from kyma_cli.step import Step, StepFactory


@dataclass
class Options:
    """Options that every command accepts."""

    verbose: bool = False
    factory: StepFactory = field(default_factory=StepFactory)
    kubeconfig_path: str = ""

    def new_step(self, msg: str) -> Step:
        """Create a step with the configured step factory."""
        return self.factory.new_step(msg)


@dataclass
class Command:
    """A command with its options, the step it is on and its cluster clients."""

    options: Options | None = None
    current_step: Step | None = None
    k8s: KymaKube | None = None
    _kubectl: KubectlWrapper | None = field(default=None, init=False, repr=False)

    def _require_options(self) -> Options:
        if self.options is None:
            raise RuntimeError("the command has no options set")
        return self.options

    def new_step(self, msg: str) -> Step:
        """Create a step and make it the command's current step."""
        step = self._require_options().new_step(msg)
        self.current_step = step
        return step

    def kubectl(self) -> KubectlWrapper:
        """Return the kubectl wrapper, creating it on first use."""
        options = self._require_options()
        if self._kubectl is None:
            self._kubectl = KubectlWrapper(
                verbose=options.verbose, kubeconfig=options.kubeconfig_path
            )
        return self._kubectl
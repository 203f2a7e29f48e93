# kyma-cli

Building blocks for tooling that manages Kyma clusters. The package runs
`kubectl`, `minikube`, `helm` and `openssl` for you, reads and edits
kubeconfig files, queries and waits for pods, installs the Kyma root
certificate into the operating system's trust store and works with
cluster test suites and test definitions.

It requires Python 3.10 or later. The external programs it drives must be
on your `PATH` when you use the parts that need them.

## Modules

| Module | Contents |
| --- | --- |
| `kyma_cli.execution` | `run_cmd` runs a program and returns its output with single quotes removed; raises `CommandError` on failure |
| `kyma_cli.kubectl` | `run_cmd`, `run_apply_cmd` and `KubectlWrapper` for `kubectl` |
| `kyma_cli.minikube` | `run_cmd`, `check_version`, `parse_docker_env` and the `docker_environment` context manager |
| `kyma_cli.helm` | `home` returns (and creates) the folder printed by `helm home` |
| `kyma_cli.files` | `kyma_home`, `save`, `load`, `save_cluster_state`, `load_cluster_state`, `Provider` |
| `kyma_cli.kubeconfig` | `load_kubeconfig`, `append_config`, `remove_config`, `RestConfig`, `KubeconfigError` |
| `kyma_cli.kube` | `KymaKube` pod queries and waits, `KubernetesApi`, `PodPhase`, `NotFoundError`, `new_from_config` |
| `kyma_cli.octopus` | Test suite models, `OctopusRestClient`, the in-memory `MockedOctopusRestClient`, `new_from_config` |
| `kyma_cli.trust` | `new_certifier`, `Keychain`, `CertAuth`, `CertUtil`, `cert_domain` |
| `kyma_cli.step` | `StepFactory`, `SimpleStep` and `SpinnerStep` progress reporting |
| `kyma_cli.command` | `Options` and `Command`, the shared state of a command |
| `kyma_cli.nice` | `print_kyma`, `print_important`, `print_importantf` |
| `kyma_cli.root` | `prompt_user` yes/no prompt and `is_with_sudo` |
| `kyma_cli.network` | `get_available_port` |

## Examples

Running a command and reporting progress:

```python
from kyma_cli.command import Command, Options

cmd = Command(Options(verbose=True))
step = cmd.new_step("Listing namespaces")
step.start()
output = cmd.kubectl().run_cmd("get", "namespaces")
step.success()
print(output)
```

`StepFactory` gives a spinner step on macOS unless `non_interactive` is set;
everywhere else it gives a plain step that prints lines.

Failures raise exceptions:

```python
from kyma_cli.execution import CommandError, run_cmd

try:
    run_cmd("ehco", "misspelled")
except CommandError as exc:
    print(exc)
```

Applying resources with `kubectl apply -f -`; the resources are sent as
YAML documents:

```python
from kyma_cli.kubectl import KubectlWrapper

wrapper = KubectlWrapper(verbose=False, kubeconfig="/path/to/kubeconfig")
wrapper.run_apply_cmd([
    {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": "demo"}},
])
```

Checking the installed minikube version (an empty string means it is
within the supported `1.3.x` range) and using its Docker environment:

```python
from kyma_cli.minikube import check_version, docker_environment

warning = check_version(verbose=False)
if warning:
    print(warning)

with docker_environment(verbose=False, profile="minikube") as env:
    print(env.get("DOCKER_HOST"))
# the previous environment variables are restored here
```

Merging a kubeconfig into the default one and waiting for a pod:

```python
from pathlib import Path

from kyma_cli.kube import PodPhase, new_from_config
from kyma_cli.kubeconfig import append_config

append_config(Path("cluster.yaml").read_bytes(), "")
kube = new_from_config("", "")
kube.wait_pod_status("kyma-installer", "installer", PodPhase.RUNNING)
```

Working with test suites against the in-memory client:

```python
from kyma_cli.octopus import ClusterTestSuite, MockedOctopusRestClient

client = MockedOctopusRestClient([], [])
client.create_test_suite(ClusterTestSuite(name="smoke"))
print([suite.name for suite in client.list_test_suites()])
client.delete_test_suite("smoke")
```

Trusting the Kyma root certificate on the running operating system:

```python
from pathlib import Path

from kyma_cli.kube import new_from_config
from kyma_cli.step import StepFactory
from kyma_cli.trust import new_certifier

kube = new_from_config("", "")
certifier = new_certifier(kube)
Path("kyma.crt").write_bytes(certifier.certificate())
step = StepFactory().new_step("Adding the Kyma root certificate")
certifier.store_certificate("kyma.crt", step)
```

Local files such as saved cluster state are kept in a `.kyma` folder in
your home directory, created with mode `0700` on first use.

## What it does not do

- It is a library only: it installs no command and has no subcommands for
  installing Kyma or for running, listing or deleting test suites from the
  shell.
- Kubeconfig users are supported with tokens, token files, basic
  credentials and client certificates; exec plugins and auth providers are
  not.
- The Kubernetes access is limited to reading pods and the Kyma
  certificate config map; other resources are reached through `kubectl`.
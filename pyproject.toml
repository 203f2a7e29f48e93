[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kyma-cli"
version = "0.1.0"
description = "Helpers for managing Kyma clusters: kubectl, minikube and helm runners, kubeconfig handling, pod waiting, certificate trust and test suites."
requires-python = ">=3.10"
keywords = ["kyma", "kubernetes", "kubectl", "minikube", "helm", "kubeconfig", "octopus"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "packaging",
    "pyyaml",
    "requests",
    "termcolor",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["kyma_cli"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true

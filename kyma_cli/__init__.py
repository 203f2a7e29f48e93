"""Helpers for managing Kyma clusters through kubectl, minikube, helm and the Kubernetes API."""

__version__ = "0.1.0"
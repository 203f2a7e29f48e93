"""Client for the test definitions and cluster test suites of the testing API."""

from __future__ import annotations

import platform
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from kyma_cli.kubeconfig import RestConfig, _http_session

GROUP_VERSION = "testing.kyma-project.io/v1alpha1"
API_PATH = "/apis"
SUITE_KIND = "ClusterTestSuite"


class TestStatus(str, Enum):
    """Status of a single test in a suite."""

    NOT_YET_SCHEDULED = "NotYetScheduled"
    SCHEDULED = "Scheduled"
    RUNNING = "Running"
    UNKNOWN = "Unknown"
    FAILED = "Failed"
    SKIPPED = "Skipped"
    SUCCEEDED = "Succeeded"


@dataclass
class TestDefinition:
    name: str
    namespace: str = ""


@dataclass
class TestDefReference:
    name: str
    namespace: str = ""


@dataclass
class TestExecution:
    id: str
    pod_phase: str = ""
    start_time: str | None = None
    completion_time: str | None = None


@dataclass
class TestResult:
    name: str
    namespace: str = ""
    status: TestStatus | str | None = None
    executions: list[TestExecution] = field(default_factory=list)


@dataclass
class TestSuiteCondition:
    type: str
    status: str = ""
    reason: str = ""
    message: str = ""


@dataclass
class TestSuiteSpec:
    concurrency: int = 0
    max_retries: int = 0
    count: int = 0
    match_names: list[TestDefReference] = field(default_factory=list)


@dataclass
class TestSuiteStatus:
    start_time: str | None = None
    completion_time: str | None = None
    conditions: list[TestSuiteCondition] = field(default_factory=list)
    results: list[TestResult] = field(default_factory=list)


@dataclass
class ClusterTestSuite:
    """A suite of tests run on the cluster."""

    name: str = ""
    api_version: str = ""
    kind: str = ""
    spec: TestSuiteSpec = field(default_factory=TestSuiteSpec)
    status: TestSuiteStatus = field(default_factory=TestSuiteStatus)

    def to_dict(self) -> dict[str, Any]:
        """Return the suite in the API's JSON form, leaving out empty fields."""
        spec: dict[str, Any] = {}
        if self.spec.concurrency:
            spec["concurrency"] = self.spec.concurrency
        if self.spec.count:
            spec["count"] = self.spec.count
        if self.spec.max_retries:
            spec["maxRetries"] = self.spec.max_retries
        if self.spec.match_names:
            spec["selectors"] = {
                "matchNames": [_ref_to_dict(ref) for ref in self.spec.match_names]
            }

        document: dict[str, Any] = {}
        if self.api_version:
            document["apiVersion"] = self.api_version
        if self.kind:
            document["kind"] = self.kind
        document["metadata"] = {"name": self.name}
        document["spec"] = spec
        status = _status_to_dict(self.status)
        if status:
            document["status"] = status
        return document


def _ref_to_dict(ref: TestDefReference) -> dict[str, str]:
    result = {"name": ref.name}
    if ref.namespace:
        result["namespace"] = ref.namespace
    return result


def _without_empty(mapping: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in mapping.items() if value not in (None, "", [], {})}


def _status_to_dict(status: TestSuiteStatus) -> dict[str, Any]:
    results = []
    for result in status.results:
        value = result.status.value if isinstance(result.status, TestStatus) else result.status
        executions = [
            _without_empty(
                {
                    "id": execution.id,
                    "podPhase": execution.pod_phase,
                    "startTime": execution.start_time,
                    "completionTime": execution.completion_time,
                }
            )
            for execution in result.executions
        ]
        results.append(
            _without_empty(
                {
                    "name": result.name,
                    "namespace": result.namespace,
                    "status": value,
                    "executions": executions,
                }
            )
        )
    conditions = [
        _without_empty(
            {
                "type": condition.type,
                "status": condition.status,
                "reason": condition.reason,
                "message": condition.message,
            }
        )
        for condition in status.conditions
    ]
    return _without_empty(
        {
            "startTime": status.start_time,
            "completionTime": status.completion_time,
            "conditions": conditions,
            "results": results,
        }
    )


def _test_status(value: str | None) -> TestStatus | str | None:
    if not value:
        return None
    try:
        return TestStatus(value)
    except ValueError:
        return value


def _suite_from_dict(data: dict[str, Any]) -> ClusterTestSuite:
    metadata = data.get("metadata") or {}
    spec = data.get("spec") or {}
    status = data.get("status") or {}
    match_names = [
        TestDefReference(name=ref.get("name", ""), namespace=ref.get("namespace", ""))
        for ref in (spec.get("selectors") or {}).get("matchNames") or []
    ]
    results = [
        TestResult(
            name=result.get("name", ""),
            namespace=result.get("namespace", ""),
            status=_test_status(result.get("status")),
            executions=[
                TestExecution(
                    id=execution.get("id", ""),
                    pod_phase=execution.get("podPhase", ""),
                    start_time=execution.get("startTime"),
                    completion_time=execution.get("completionTime"),
                )
                for execution in result.get("executions") or []
            ],
        )
        for result in status.get("results") or []
    ]
    conditions = [
        TestSuiteCondition(
            type=condition.get("type", ""),
            status=condition.get("status", ""),
            reason=condition.get("reason", ""),
            message=condition.get("message", ""),
        )
        for condition in status.get("conditions") or []
    ]
    return ClusterTestSuite(
        name=metadata.get("name", ""),
        api_version=data.get("apiVersion", ""),
        kind=data.get("kind", ""),
        spec=TestSuiteSpec(
            concurrency=spec.get("concurrency", 0),
            max_retries=spec.get("maxRetries", 0),
            count=spec.get("count", 0),
            match_names=match_names,
        ),
        status=TestSuiteStatus(
            start_time=status.get("startTime"),
            completion_time=status.get("completionTime"),
            conditions=conditions,
            results=results,
        ),
    )


def _definition_from_dict(data: dict[str, Any]) -> TestDefinition:
    metadata = data.get("metadata") or {}
    return TestDefinition(name=metadata.get("name", ""), namespace=metadata.get("namespace", ""))


class OctopusInterface(ABC):
    """Operations on test definitions and cluster test suites."""

    @abstractmethod
    def list_test_definitions(self) -> list[TestDefinition]:
        """Return all test definitions."""

    @abstractmethod
    def list_test_suites(self) -> list[ClusterTestSuite]:
        """Return all cluster test suites."""

    @abstractmethod
    def create_test_suite(self, suite: ClusterTestSuite) -> ClusterTestSuite:
        """Create a cluster test suite and return it as stored."""

    @abstractmethod
    def delete_test_suite(self, name: str) -> None:
        """Delete the cluster test suite with the given name."""

    @abstractmethod
    def get_test_suite(self, name: str) -> ClusterTestSuite:
        """Return the cluster test suite with the given name."""


class OctopusRestClient(OctopusInterface):
    """Talks to the testing API over HTTP. Failed requests raise requests.HTTPError."""

    def __init__(self, config: RestConfig) -> None:
        self.config = config
        self._session = _http_session(config)
        self._base = (
            f"{config.host.rstrip('/')}{config.api_path or API_PATH}/"
            f"{config.group_version or GROUP_VERSION}"
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = self._session.request(
            method, f"{self._base}/{path}", timeout=self.config.timeout, **kwargs
        )
        response.raise_for_status()
        return response.json() if response.content else {}

    def list_test_definitions(self) -> list[TestDefinition]:
        data = self._request("GET", "testdefinitions")
        return [_definition_from_dict(item) for item in data.get("items") or []]

    def list_test_suites(self) -> list[ClusterTestSuite]:
        data = self._request("GET", "clustertestsuites")
        return [_suite_from_dict(item) for item in data.get("items") or []]

    def create_test_suite(self, suite: ClusterTestSuite) -> ClusterTestSuite:
        return _suite_from_dict(self._request("POST", "clustertestsuites", json=suite.to_dict()))

    def delete_test_suite(self, name: str) -> None:
        self._request("DELETE", f"clustertestsuites/{name}")

    def get_test_suite(self, name: str) -> ClusterTestSuite:
        return _suite_from_dict(self._request("GET", f"clustertestsuites/{name}"))


class MockedOctopusRestClient(OctopusInterface):
    """Keeps test definitions and suites in memory."""

    def __init__(
        self,
        test_definitions: list[TestDefinition] | None = None,
        test_suites: list[ClusterTestSuite] | None = None,
    ) -> None:
        self.test_definitions = test_definitions if test_definitions is not None else []
        self.test_suites = test_suites if test_suites is not None else []

    def list_test_definitions(self) -> list[TestDefinition]:
        return self.test_definitions

    def list_test_suites(self) -> list[ClusterTestSuite]:
        return self.test_suites

    def create_test_suite(self, suite: ClusterTestSuite) -> ClusterTestSuite:
        self.test_suites.append(suite)
        return suite

    def delete_test_suite(self, name: str) -> None:
        for index, suite in enumerate(self.test_suites):
            if suite.name == name:
                del self.test_suites[index]
                return
        raise LookupError("test not found")

    def get_test_suite(self, name: str) -> ClusterTestSuite:
        for suite in self.test_suites:
            if suite.name == name:
                return suite
        raise LookupError("not found")


def _default_user_agent() -> str:
    return f"kyma-cli ({platform.system().lower()}/{platform.machine().lower()})"


def new_from_config(config: RestConfig) -> OctopusRestClient:
    """Set the testing API defaults on ``config`` and create a client from it."""
    config.group_version = GROUP_VERSION
    config.api_path = API_PATH
    if not config.user_agent:
        config.user_agent = _default_user_agent()
    return OctopusRestClient(config)
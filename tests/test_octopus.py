import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlsplit

import pytest
import requests

from kyma_cli import octopus
from kyma_cli.kubeconfig import RestConfig

PREFIX = "/apis/testing.kyma-project.io/v1alpha1"


class _Handler(BaseHTTPRequestHandler):
    def log_message(self, format, *args):
        pass

    def _send(self, code, body=None):
        data = json.dumps(body).encode() if body is not None else b""
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _suite_name(self, path):
        marker = PREFIX + "/clustertestsuites/"
        return path[len(marker):] if path.startswith(marker) else None

    def do_GET(self):
        state = self.server.state
        state["user_agent"] = self.headers.get("User-Agent")
        path = urlsplit(self.path).path
        if path == PREFIX + "/testdefinitions":
            self._send(200, {"items": state["definitions"]})
        elif path == PREFIX + "/clustertestsuites":
            self._send(200, {"items": list(state["suites"].values())})
        elif (name := self._suite_name(path)) is not None and name in state["suites"]:
            self._send(200, state["suites"][name])
        else:
            self._send(404, {"message": "not found"})

    def do_POST(self):
        body = json.loads(self.rfile.read(int(self.headers["Content-Length"])))
        self.server.state["suites"][body["metadata"]["name"]] = body
        self._send(201, body)

    def do_DELETE(self):
        name = self._suite_name(urlsplit(self.path).path)
        if name in self.server.state["suites"]:
            del self.server.state["suites"][name]
            self._send(200, {})
        else:
            self._send(404, {"message": "not found"})


@pytest.fixture
def server():
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    httpd.state = {
        "suites": {},
        "definitions": [
            {"metadata": {"name": "test1", "namespace": "kyma-test"}},
            {"metadata": {"name": "test2", "namespace": "kyma-system"}},
        ],
    }
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield httpd
    httpd.shutdown()
    httpd.server_close()


@pytest.fixture
def client(server):
    host, port = server.server_address
    return octopus.new_from_config(RestConfig(host=f"http://{host}:{port}", timeout=5))


def _suite(name):
    return octopus.ClusterTestSuite(
        name=name,
        api_version="testing.kyma-project.io/v1alpha1",
        kind="ClusterTestSuite",
        spec=octopus.TestSuiteSpec(
            concurrency=3,
            max_retries=2,
            count=1,
            match_names=[
                octopus.TestDefReference(name="test1", namespace="kyma-test"),
                octopus.TestDefReference(name="test2", namespace="kyma-system"),
            ],
        ),
    )


def _named(*names):
    return [octopus.ClusterTestSuite(name=name) for name in names]


def test_to_dict_carries_api_fields():
    document = _suite("TestOneProper").to_dict()
    assert document["apiVersion"] == "testing.kyma-project.io/v1alpha1"
    assert document["kind"] == "ClusterTestSuite"
    assert document["metadata"] == {"name": "TestOneProper"}
    assert document["spec"]["maxRetries"] == 2
    assert document["spec"]["concurrency"] == 3
    assert document["spec"]["count"] == 1
    assert document["spec"]["selectors"]["matchNames"][1] == {
        "name": "test2",
        "namespace": "kyma-system",
    }
    assert "status" not in document


def test_to_dict_includes_results():
    suite = octopus.ClusterTestSuite(name="s")
    suite.status.results.append(
        octopus.TestResult(name="test-1", status=octopus.TestStatus.FAILED)
    )
    document = suite.to_dict()
    assert document["status"]["results"] == [{"name": "test-1", "status": "Failed"}]


def test_new_from_config_sets_defaults():
    config = RestConfig(host="https://api.example.com")
    octopus.new_from_config(config)
    assert config.api_path == "/apis"
    assert config.group_version == "testing.kyma-project.io/v1alpha1"
    assert config.user_agent.startswith("kyma-cli")


def test_new_from_config_keeps_user_agent():
    config = RestConfig(host="https://api.example.com", user_agent="custom")
    octopus.new_from_config(config)
    assert config.user_agent == "custom"


def test_rest_client_lists_definitions(client, server):
    definitions = client.list_test_definitions()
    assert definitions == [
        octopus.TestDefinition(name="test1", namespace="kyma-test"),
        octopus.TestDefinition(name="test2", namespace="kyma-system"),
    ]
    assert server.state["user_agent"] == client.config.user_agent


def test_rest_client_create_and_get_round_trip(client):
    suite = _suite("TestOneProper")
    created = client.create_test_suite(suite)
    assert created == suite
    assert client.get_test_suite("TestOneProper") == suite
    assert [s.name for s in client.list_test_suites()] == ["TestOneProper"]


def test_rest_client_delete(client):
    client.create_test_suite(_suite("gone"))
    client.delete_test_suite("gone")
    assert client.list_test_suites() == []
    with pytest.raises(requests.HTTPError):
        client.get_test_suite("gone")


def test_rest_client_delete_missing(client):
    with pytest.raises(requests.HTTPError):
        client.delete_test_suite("TEST_NAME_43")


def test_mock_lists_what_it_was_given():
    definitions = [octopus.TestDefinition(name="test1"), octopus.TestDefinition(name="test2")]
    mock = octopus.MockedOctopusRestClient(definitions, _named("test1", "test2"))
    assert [d.name for d in mock.list_test_definitions()] == ["test1", "test2"]
    assert [s.name for s in mock.list_test_suites()] == ["test1", "test2"]


def test_mock_delete_existing_suite():
    mock = octopus.MockedOctopusRestClient(None, _named("TEST_NAME_1", "TEST_NAME_2"))
    mock.delete_test_suite("TEST_NAME_1")
    assert [s.name for s in mock.list_test_suites()] == ["TEST_NAME_2"]


def test_mock_delete_missing_suite():
    mock = octopus.MockedOctopusRestClient(None, _named("TEST_NAME_1", "TEST_NAME_2"))
    with pytest.raises(LookupError, match="test not found"):
        mock.delete_test_suite("TEST_NAME_43")


def test_mock_create_then_get():
    mock = octopus.MockedOctopusRestClient()
    suite = _suite("created")
    assert mock.create_test_suite(suite) is suite
    assert mock.get_test_suite("created") is suite


def test_mock_get_missing():
    mock = octopus.MockedOctopusRestClient(None, _named("test1"))
    with pytest.raises(LookupError, match="not found"):
        mock.get_test_suite("test2")
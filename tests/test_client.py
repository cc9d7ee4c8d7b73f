import json
from typing import Any

import pytest
import requests

from rsd.client import DeployClient, DeployError
from rsd.settings import Settings


class FakeResponse:
    def __init__(self, status_code: int = 200, body: bytes = b"{}") -> None:
        self.status_code = status_code
        self.content = body
        self.text = body.decode("utf-8")

    def json(self) -> Any:
        return json.loads(self.content)


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    calls: dict[str, Any] = {"response": FakeResponse()}

    def fake_request(method, url, **kwargs):
        calls.update(method=method, url=url, **kwargs)
        return calls["response"]

    monkeypatch.setattr(requests, "request", fake_request)
    return calls


def test_send_package_posts_compact_json(captured: dict[str, Any]) -> None:
    client = DeployClient("https://api.example.com/upload", "tok")

    client.send_package({"a.js": "x"})

    assert captured["method"] == "POST"
    assert captured["url"] == "https://api.example.com/upload"
    assert captured["data"] == b'{"a.js":"x"}'
    assert captured["headers"]["Authorization"] == "Bearer tok"
    assert captured["headers"]["Content-Type"] == "text/plain"
    assert captured["verify"] is True


@pytest.mark.parametrize(("environment", "verify"), [("prod", True), ("dev", False)])
def test_tls_validation_follows_environment(captured: dict[str, Any], environment: str, verify: bool) -> None:
    settings = Settings(api_endpoint="https://api.example.com/upload", api_token="tok", environment=environment)

    DeployClient.from_settings(settings).send_package({})

    assert captured["verify"] is verify


def test_send_package_returns_parsed_response(captured: dict[str, Any]) -> None:
    captured["response"] = FakeResponse(body=b'{"old/a.js": "previous"}')
    client = DeployClient("http://localhost:8080/deploy", "tok")

    assert client.send_package({"a.js": "x"}) == {"old/a.js": "previous"}


def test_empty_body_is_empty_mapping(captured: dict[str, Any]) -> None:
    captured["response"] = FakeResponse(body=b"")
    assert DeployClient("http://localhost/", "tok").send_package({}) == {}


@pytest.mark.parametrize(
    "response",
    [FakeResponse(status_code=401, body=b"unauthorized"), FakeResponse(body=b"not json"), FakeResponse(body=b"[1]")],
)
def test_bad_responses_raise(captured: dict[str, Any], response: FakeResponse) -> None:
    captured["response"] = response
    with pytest.raises(DeployError):
        DeployClient("http://localhost/", "tok").send_package({})


def test_transport_error_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_request(method, url, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "request", fake_request)

    with pytest.raises(DeployError, match="connection refused"):
        DeployClient("http://localhost/", "tok").send_package({})


@pytest.mark.parametrize(
    ("endpoint", "token"),
    [("", "tok"), ("https://api.example.com", ""), ("ftp://api.example.com", "tok")],
)
def test_client_validates_configuration(endpoint: str, token: str) -> None:
    with pytest.raises(DeployError):
        DeployClient(endpoint, token)

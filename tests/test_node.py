import threading

import pytest
import requests

import gateway.node as node_module
from gateway.node import HttpNode, NodeError


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")


class Waiter:
    def __init__(self):
        self.event = threading.Event()
        self.result = None

    def __call__(self, err, value=None):
        self.result = (err, value)
        self.event.set()

    def wait(self):
        assert self.event.wait(5)
        return self.result


@pytest.fixture
def http(monkeypatch):
    calls = {"get": [], "post": []}
    routes = {"get": {}, "post": {}}

    def fake_get(url, **kwargs):
        calls["get"].append((url, kwargs))
        handler = routes["get"].get(url)
        if handler is None:
            return FakeResponse({}, status_code=404)
        return handler(**kwargs)

    def fake_post(url, **kwargs):
        calls["post"].append((url, kwargs))
        return routes["post"][url](**kwargs)

    monkeypatch.setattr(node_module.requests, "get", fake_get)
    monkeypatch.setattr(node_module.requests, "post", fake_post)
    routes["get"]["http://node:8008/whoami"] = lambda **kw: FakeResponse({"id": "@abc123=.ed25519"})
    return calls, routes


def test_connect_reads_identity(http):
    calls, _ = http

    node = HttpNode("http://node:8008/", timeout=3)

    assert node.id == "@abc123=.ed25519"
    assert node.node_url == "http://node:8008"
    assert calls["get"][0] == ("http://node:8008/whoami", {"timeout": 3})


def test_connect_without_id_fails(http):
    _, routes = http
    routes["get"]["http://node:8008/whoami"] = lambda **kw: FakeResponse({})

    with pytest.raises(NodeError):
        HttpNode("http://node:8008")


def test_empty_url_rejected():
    with pytest.raises(ValueError):
        HttpNode("")


def test_create_invitation_calls_back_with_invitation(http):
    calls, routes = http
    routes["post"]["http://node:8008/invite/create"] = lambda **kw: FakeResponse({"invitation": "invite-xyz"})
    node = HttpNode("http://node:8008")
    waiter = Waiter()

    node.create_invitation(1, waiter)

    assert waiter.wait() == (None, "invite-xyz")
    assert calls["post"][0][1]["json"] == {"uses": 1}


def test_create_invitation_reports_transport_error(http):
    _, routes = http
    failure = requests.exceptions.ConnectionError("refused")

    def refuse(**kw):
        raise failure

    routes["post"]["http://node:8008/invite/create"] = refuse
    node = HttpNode("http://node:8008")
    waiter = Waiter()

    node.create_invitation(1, waiter)

    assert waiter.wait() == (failure, None)


def test_create_invitation_reports_missing_invitation(http):
    _, routes = http
    routes["post"]["http://node:8008/invite/create"] = lambda **kw: FakeResponse({"ok": True})
    node = HttpNode("http://node:8008")
    waiter = Waiter()

    node.create_invitation(1, waiter)

    err, value = waiter.wait()
    assert isinstance(err, NodeError)
    assert value is None


def test_get_message(http):
    _, routes = http
    routes["get"]["http://node:8008/get/%25abc%3D.sha256"] = lambda **kw: FakeResponse({"key": "%abc=.sha256"})
    node = HttpNode("http://node:8008")

    found = Waiter()
    node.get_message("%abc=.sha256", found)
    assert found.wait() == (None, {"key": "%abc=.sha256"})

    missing = Waiter()
    node.get_message("%missing=.sha256", missing)
    assert missing.wait() == (None, None)

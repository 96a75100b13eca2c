import asyncio
import threading

import pytest

NODE_ID = "@abc123=.ed25519"


class FakeNode:
    """
    In-memory node. ``mode`` controls when callbacks fire:
    "sync" (before the call returns), "loop" (next event loop turn) or
    "thread" (from a separate thread).
    """

    def __init__(self, node_id=NODE_ID, invitations=None, error=None, messages=None, mode="sync"):
        self.id = node_id
        self.invitations = list(invitations or [])
        self.error = error
        self.messages = dict(messages or {})
        self.message_error = None
        self.mode = mode
        self.invite_calls = []
        self.get_calls = []

    def _answer(self, callback, err, value):
        if self.mode == "sync":
            callback(err, value)
        elif self.mode == "loop":
            asyncio.get_running_loop().call_soon(callback, err, value)
        else:
            threading.Thread(target=callback, args=(err, value), daemon=True).start()

    def create_invitation(self, count, callback):
        self.invite_calls.append(count)
        if self.error is not None:
            self._answer(callback, self.error, None)
        else:
            self._answer(callback, None, self.invitations.pop(0))

    def get_message(self, key, callback):
        self.get_calls.append(key)
        if self.message_error is not None:
            self._answer(callback, self.message_error, None)
        else:
            self._answer(callback, None, self.messages.get(key))


class IdentityOnlyNode:
    def __init__(self, node_id=NODE_ID):
        self.id = node_id

    def create_invitation(self, count, callback):
        callback(None, "unused")


@pytest.fixture
def fake_node():
    return FakeNode(invitations=["invite-xyz"])


@pytest.fixture
def fatal_calls():
    return []


@pytest.fixture
def make_client(fatal_calls):
    from fastapi.testclient import TestClient

    from gateway.main import create_app

    def _make(node, **kwargs):
        kwargs.setdefault("fatal_handler", fatal_calls.append)
        kwargs.setdefault("port", 8080)
        return TestClient(create_app(node, **kwargs))

    return _make

import logging
import threading
from typing import Any, Callable, Dict, Optional, Protocol

import requests

logger = logging.getLogger(__name__)

NodeCallback = Callable[..., None]


class Node(Protocol):
    """What the gateway needs from the node it fronts."""

    id: str

    def create_invitation(self, count: int, callback: NodeCallback) -> None:
        ...


class NodeError(Exception):
    """The node answered, but not with what was asked for."""


class HttpNode:
    """
    Client for a node exposing its RPC over HTTP/JSON.

    Calls are asynchronous in the node's callback style: each one runs the
    HTTP request on a daemon thread and reports ``callback(err, result)``
    from that thread.
    """

    def __init__(self, node_url: str, timeout: float = 30.0):
        if not node_url:
            raise ValueError("Node URL cannot be empty")
        self.node_url = node_url.rstrip("/")
        self.timeout = timeout
        self.id = self.whoami()
        logger.info(f"Connected to node {self.id} at {self.node_url}")

    def whoami(self) -> str:
        response = requests.get(f"{self.node_url}/whoami", timeout=self.timeout)
        response.raise_for_status()
        node_id = response.json().get("id")
        if not node_id:
            raise NodeError("whoami response has no id")
        return str(node_id)

    def _call(self, fn: Callable[[], Any], callback: NodeCallback, what: str) -> None:
        def run():
            try:
                result = fn()
            except (requests.exceptions.RequestException, NodeError, ValueError) as e:
                logger.error(f"Node call {what} failed: {e}")
                callback(e, None)
                return
            callback(None, result)

        threading.Thread(target=run, name=f"node-{what}", daemon=True).start()

    def _create_invitation(self, count: int) -> str:
        response = requests.post(
            f"{self.node_url}/invite/create",
            json={"uses": int(count)},
            timeout=self.timeout,
        )
        response.raise_for_status()
        invitation = response.json().get("invitation")
        if not invitation:
            raise NodeError("invite/create response has no invitation")
        return str(invitation)

    def create_invitation(self, count: int, callback: NodeCallback) -> None:
        self._call(lambda: self._create_invitation(count), callback, "invite.create")

    def _get_message(self, key: str) -> Optional[Dict[str, Any]]:
        response = requests.get(
            f"{self.node_url}/get/{requests.utils.quote(key, safe='')}",
            timeout=self.timeout,
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    def get_message(self, key: str, callback: NodeCallback) -> None:
        self._call(lambda: self._get_message(key), callback, "get")

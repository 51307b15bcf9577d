"""Remote tree client: the only code that talks to the storage provider.

The provider exposes a tree of nodes (directories and files), each addressed
by an opaque id it assigns. A ``RemoteSession`` is opened per high-level
operation and passed explicitly to the locator, provisioner and retry
executor; nothing here is cached at module level.

Failure mapping (every call):
    429 / 502-504 / timeouts / dropped links   -> RemoteTransientError
    404                                        -> RemoteNodeNotFoundError
    anything else >= 400                       -> RemoteFatalError
    bad credentials at connect                 -> RemoteConnectionError
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

import requests

from ..core.config import Settings, settings
from ..exceptions import (
    RemoteConnectionError,
    RemoteFatalError,
    RemoteNodeNotFoundError,
    RemoteTransientError,
    VaultException,
)

logger = logging.getLogger(__name__)

# HTTP statuses the provider uses for throttling and short outages.
TRANSIENT_STATUSES = frozenset({429, 502, 503, 504})


@dataclass(frozen=True)
class RemoteNode:
    """A directory or file in the remote tree."""
    id: str
    name: str
    is_folder: bool = True
    size: Optional[int] = None


@dataclass(frozen=True)
class RemoteCredentials:
    email: str
    password: str

    @classmethod
    def from_settings(cls, cfg: Settings = settings) -> "RemoteCredentials":
        return cls(email=cfg.remote_email, password=cfg.remote_password)

    def __repr__(self) -> str:
        return f"RemoteCredentials(email={self.email!r}, password='***')"


class RemoteSession(ABC):
    """An authenticated view of the remote tree."""

    root: RemoteNode

    @abstractmethod
    def list_children(self, node: RemoteNode) -> List[RemoteNode]:
        ...

    @abstractmethod
    def make_directory(self, parent: RemoteNode, name: str) -> RemoteNode:
        ...

    @abstractmethod
    def upload(self, parent: RemoteNode, name: str, data: bytes) -> RemoteNode:
        ...

    @abstractmethod
    def delete(self, node: RemoteNode) -> None:
        ...

    @abstractmethod
    def download(self, node: RemoteNode) -> bytes:
        ...

    def close(self) -> None:
        """Release any held connections. Safe to call more than once."""


class RemoteTreeClient(ABC):
    """Factory for remote sessions."""

    @abstractmethod
    def connect(self, credentials: RemoteCredentials) -> RemoteSession:
        ...


# ---------------------------------------------------------------------------
# HTTP implementation
# ---------------------------------------------------------------------------


def _json_object(resp: requests.Response, error_cls: Type[VaultException] = RemoteFatalError) -> Dict[str, Any]:
    """Decode a JSON object body, raising *error_cls* for anything else."""
    try:
        data = resp.json()
    except ValueError as e:
        raise error_cls("Remote storage returned a non-JSON response") from e
    if not isinstance(data, dict):
        raise error_cls("Remote storage returned an unexpected response body")
    return data


def _node_from_json(data: Any) -> RemoteNode:
    if not isinstance(data, dict):
        raise RemoteFatalError("Remote storage returned a malformed node")
    node_id = data.get("id")
    if not node_id:
        raise RemoteFatalError("Remote storage returned a node without an id")
    size_raw = data.get("size")
    try:
        size = int(size_raw) if size_raw is not None else None
    except (TypeError, ValueError):
        size = None
    return RemoteNode(
        id=str(node_id),
        name=data.get("name", ""),
        is_folder=data.get("type", "folder") == "folder",
        size=size,
    )


def _retry_after(resp: requests.Response) -> Optional[float]:
    raw = resp.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _raise_for_remote(resp: requests.Response, node_id: Optional[str] = None) -> None:
    """Translate an HTTP error response into the remote error taxonomy."""
    status = resp.status_code
    if status < 400:
        return
    if status in TRANSIENT_STATUSES:
        raise RemoteTransientError(
            f"Remote storage returned {status}", retry_after=_retry_after(resp)
        )
    if status == 404:
        raise RemoteNodeNotFoundError(node_id or "unknown")
    raise RemoteFatalError(f"Remote storage returned {status}: {resp.text[:200]}", status=status)


class HttpRemoteSession(RemoteSession):
    """Session bound to one bearer token and one pooled HTTP connection set."""

    def __init__(self, http: requests.Session, api_url: str, root: RemoteNode, timeout: tuple):
        self._http = http
        self._api_url = api_url
        self._timeout = timeout
        self.root = root

    def _request(self, method: str, path: str, node_id: Optional[str] = None, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", self._timeout)
        url = f"{self._api_url}{path}"
        try:
            resp = self._http.request(method, url, **kwargs)
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            raise RemoteTransientError(f"Remote storage unreachable: {type(e).__name__}") from e
        except requests.exceptions.RequestException as e:
            raise RemoteFatalError(f"Remote storage request failed: {e}") from e
        _raise_for_remote(resp, node_id)
        return resp

    def list_children(self, node: RemoteNode) -> List[RemoteNode]:
        children: List[RemoteNode] = []
        page_token: Optional[str] = None
        while True:
            params = {"page_token": page_token} if page_token else None
            resp = self._request("GET", f"/v1/nodes/{node.id}/children", node.id, params=params)
            data = _json_object(resp)
            children.extend(_node_from_json(item) for item in data.get("nodes") or [])
            page_token = data.get("next_page_token")
            if not page_token:
                break
        return children

    def make_directory(self, parent: RemoteNode, name: str) -> RemoteNode:
        resp = self._request("POST", f"/v1/nodes/{parent.id}/folders", parent.id, json={"name": name})
        node = _node_from_json(_json_object(resp))
        logger.debug("Remote directory created", extra={"node_id": node.id, "parent_node_id": parent.id})
        return node

    def upload(self, parent: RemoteNode, name: str, data: bytes) -> RemoteNode:
        resp = self._request(
            "POST",
            f"/v1/nodes/{parent.id}/files",
            parent.id,
            data={"name": name},
            files={"file": (name, data, "application/pdf")},
        )
        node = _node_from_json(_json_object(resp))
        logger.debug("Remote upload complete", extra={"node_id": node.id, "bytes": len(data)})
        return node

    def delete(self, node: RemoteNode) -> None:
        self._request("DELETE", f"/v1/nodes/{node.id}", node.id)

    def download(self, node: RemoteNode) -> bytes:
        return self._request("GET", f"/v1/nodes/{node.id}/content", node.id).content

    def close(self) -> None:
        self._http.close()


class HttpRemoteTreeClient(RemoteTreeClient):
    """Opens sessions against the provider's JSON API."""

    def __init__(self, api_url: str, connect_timeout: float = 5.0, read_timeout: float = 120.0):
        self.api_url = api_url.rstrip("/")
        self.timeout = (connect_timeout, read_timeout)

    @classmethod
    def from_settings(cls, cfg: Settings = settings) -> "HttpRemoteTreeClient":
        return cls(cfg.remote_api_url, cfg.remote_connect_timeout, cfg.remote_read_timeout)

    def connect(self, credentials: RemoteCredentials) -> RemoteSession:
        if not credentials.email or not credentials.password:
            raise RemoteConnectionError("Remote storage credentials are not configured")

        http = requests.Session()
        try:
            resp = http.post(
                f"{self.api_url}/v1/sessions",
                json={"email": credentials.email, "password": credentials.password},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            http.close()
            raise RemoteConnectionError(f"Could not reach remote storage: {type(e).__name__}") from e

        if resp.status_code in (401, 403):
            http.close()
            raise RemoteConnectionError("Remote storage rejected the account credentials")
        if resp.status_code >= 400:
            http.close()
            raise RemoteConnectionError(f"Remote storage login failed with {resp.status_code}")

        try:
            data = _json_object(resp, RemoteConnectionError)
        except RemoteConnectionError:
            http.close()
            raise
        token = data.get("token")
        root = data.get("root")
        if not token or not root:
            http.close()
            raise RemoteConnectionError("Remote storage login response is missing token or root")
        try:
            root_node = _node_from_json(root)
        except RemoteFatalError as e:
            http.close()
            raise RemoteConnectionError("Remote storage login response has a malformed root") from e

        http.headers.update({"Authorization": f"Bearer {token}"})
        logger.debug("Remote session opened", extra={"api_url": self.api_url})
        return HttpRemoteSession(http, self.api_url, root_node, self.timeout)


def get_remote_client() -> RemoteTreeClient:
    """FastAPI dependency: a client built from current settings.

    Overridden in tests with an in-memory tree.
    """
    return HttpRemoteTreeClient.from_settings()

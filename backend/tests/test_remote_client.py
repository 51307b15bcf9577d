"""Tests for the HTTP remote tree client, with ``requests`` mocked out."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from pdfvault.exceptions import (
    RemoteConnectionError,
    RemoteFatalError,
    RemoteNodeNotFoundError,
    RemoteTransientError,
)
from pdfvault.remote.client import (
    HttpRemoteSession,
    HttpRemoteTreeClient,
    RemoteCredentials,
    RemoteNode,
)

API = "https://remote.test/api"
ROOT = RemoteNode(id="root-1", name="Cloud Drive")
CREDS = RemoteCredentials(email="vault@example.com", password="remote-secret")


def _response(status: int = 200, json_data=None, content: bytes = b"", headers=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = json_data
    resp.content = content
    resp.headers = headers or {}
    resp.text = ""
    return resp


def _session(*responses) -> tuple:
    http = MagicMock()
    http.request.side_effect = list(responses)
    return HttpRemoteSession(http, API, ROOT, (1.0, 2.0)), http


class TestConnect:

    @patch("pdfvault.remote.client.requests.Session")
    def test_success_sets_bearer_and_root(self, session_cls):
        http = session_cls.return_value
        http.headers = {}
        http.post.return_value = _response(200, {"token": "tok", "root": {"id": "r1", "name": "Cloud Drive"}})

        session = HttpRemoteTreeClient(API).connect(CREDS)

        assert session.root == RemoteNode(id="r1", name="Cloud Drive")
        assert http.headers["Authorization"] == "Bearer tok"
        url = http.post.call_args[0][0]
        assert url == f"{API}/v1/sessions"
        assert http.post.call_args[1]["json"] == {"email": CREDS.email, "password": CREDS.password}

    def test_missing_credentials(self):
        with pytest.raises(RemoteConnectionError):
            HttpRemoteTreeClient(API).connect(RemoteCredentials(email="", password=""))

    @patch("pdfvault.remote.client.requests.Session")
    def test_rejected_credentials(self, session_cls):
        session_cls.return_value.post.return_value = _response(401)
        with pytest.raises(RemoteConnectionError):
            HttpRemoteTreeClient(API).connect(CREDS)
        session_cls.return_value.close.assert_called_once()

    @patch("pdfvault.remote.client.requests.Session")
    def test_unreachable(self, session_cls):
        session_cls.return_value.post.side_effect = requests.exceptions.ConnectionError("down")
        with pytest.raises(RemoteConnectionError):
            HttpRemoteTreeClient(API).connect(CREDS)

    @patch("pdfvault.remote.client.requests.Session")
    def test_incomplete_login_response(self, session_cls):
        session_cls.return_value.post.return_value = _response(200, {"token": "tok"})
        with pytest.raises(RemoteConnectionError):
            HttpRemoteTreeClient(API).connect(CREDS)

    @patch("pdfvault.remote.client.requests.Session")
    def test_non_json_login_response(self, session_cls):
        resp = _response(200)
        resp.json.side_effect = ValueError("Expecting value")
        session_cls.return_value.post.return_value = resp
        with pytest.raises(RemoteConnectionError):
            HttpRemoteTreeClient(API).connect(CREDS)
        session_cls.return_value.close.assert_called_once()

    @patch("pdfvault.remote.client.requests.Session")
    def test_malformed_root_in_login_response(self, session_cls):
        session_cls.return_value.post.return_value = _response(200, {"token": "tok", "root": "r1"})
        with pytest.raises(RemoteConnectionError):
            HttpRemoteTreeClient(API).connect(CREDS)

    def test_credentials_repr_hides_password(self):
        assert "remote-secret" not in repr(CREDS)


class TestSessionCalls:

    def test_list_children_follows_pages(self):
        session, http = _session(
            _response(200, {"nodes": [{"id": "a", "name": "A", "type": "folder"}], "next_page_token": "p2"}),
            _response(200, {"nodes": [{"id": "b", "name": "b.pdf", "type": "file", "size": 10}]}),
        )
        children = session.list_children(ROOT)
        assert [c.id for c in children] == ["a", "b"]
        assert children[0].is_folder and not children[1].is_folder
        assert children[1].size == 10
        second_call = http.request.call_args_list[1]
        assert second_call[1]["params"] == {"page_token": "p2"}

    def test_make_directory(self):
        session, http = _session(_response(200, {"id": "new", "name": "Docs", "type": "folder"}))
        node = session.make_directory(ROOT, "Docs")
        assert node.id == "new"
        method, url = http.request.call_args[0]
        assert (method, url) == ("POST", f"{API}/v1/nodes/root-1/folders")
        assert http.request.call_args[1]["json"] == {"name": "Docs"}

    def test_upload_sends_multipart(self):
        session, http = _session(_response(200, {"id": "f1", "name": "1-a.pdf", "type": "file", "size": 5}))
        node = session.upload(ROOT, "1-a.pdf", b"%PDF-")
        assert node == RemoteNode(id="f1", name="1-a.pdf", is_folder=False, size=5)
        kwargs = http.request.call_args[1]
        assert kwargs["files"]["file"][1] == b"%PDF-"
        assert kwargs["data"] == {"name": "1-a.pdf"}

    def test_download_returns_bytes(self):
        session, _ = _session(_response(200, content=b"%PDF-1.7"))
        assert session.download(RemoteNode(id="f1", name="x", is_folder=False)) == b"%PDF-1.7"

    def test_close_closes_http_session(self):
        session, http = _session()
        session.close()
        http.close.assert_called_once()


class TestErrorMapping:

    @pytest.mark.parametrize("status", [429, 502, 503, 504])
    def test_transient_statuses(self, status):
        session, _ = _session(_response(status, headers={"Retry-After": "7"}))
        with pytest.raises(RemoteTransientError) as exc_info:
            session.delete(RemoteNode(id="n1", name="x"))
        assert exc_info.value.status_code == 503
        assert exc_info.value.retry_after == 7.0

    def test_not_found(self):
        session, _ = _session(_response(404))
        with pytest.raises(RemoteNodeNotFoundError):
            session.delete(RemoteNode(id="n1", name="x"))

    @pytest.mark.parametrize("status", [400, 403, 500])
    def test_other_errors_are_fatal(self, status):
        session, _ = _session(_response(status))
        with pytest.raises(RemoteFatalError):
            session.make_directory(ROOT, "x")

    def test_timeout_is_transient(self):
        session, _ = _session(requests.exceptions.Timeout("slow"))
        with pytest.raises(RemoteTransientError):
            session.list_children(ROOT)

    def test_dropped_connection_is_transient(self):
        session, _ = _session(requests.exceptions.ConnectionError("reset"))
        with pytest.raises(RemoteTransientError):
            session.download(RemoteNode(id="f", name="f", is_folder=False))

    def test_node_without_id_is_fatal(self):
        session, _ = _session(_response(200, {"name": "no id"}))
        with pytest.raises(RemoteFatalError):
            session.make_directory(ROOT, "x")

    def test_non_json_body_is_fatal(self):
        resp = _response(200)
        resp.json.side_effect = ValueError("Expecting value")
        session, _ = _session(resp)
        with pytest.raises(RemoteFatalError):
            session.list_children(ROOT)

    def test_non_object_body_is_fatal(self):
        session, _ = _session(_response(200, ["not", "an", "object"]))
        with pytest.raises(RemoteFatalError):
            session.make_directory(ROOT, "x")

    def test_malformed_child_entry_is_fatal(self):
        session, _ = _session(_response(200, {"nodes": ["n1"]}))
        with pytest.raises(RemoteFatalError):
            session.list_children(ROOT)

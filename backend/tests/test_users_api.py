"""Tests for /api/user/me."""

from pdfvault.models import Folder, StoredFile, User

from fakes import PDF_BYTES


class TestMe:

    def test_get_me(self, client, register):
        user_id, headers = register()
        resp = client.get("/api/user/me", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"user_id": user_id, "email": "alice@example.com", "username": "alice"}

    def test_update_username(self, client, auth_headers):
        resp = client.patch("/api/user/me", json={"username": "alicia"}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["username"] == "alicia"

    def test_update_email_normalised(self, client, auth_headers):
        resp = client.patch("/api/user/me", json={"email": "NEW@Example.com"}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["email"] == "new@example.com"

    def test_update_requires_a_field(self, client, auth_headers):
        resp = client.patch("/api/user/me", json={}, headers=auth_headers)
        assert resp.status_code == 400

    def test_update_to_taken_username(self, client, register):
        register(email="a@example.com", username="taken")
        _, headers = register(email="b@example.com", username="other")
        resp = client.patch("/api/user/me", json={"username": "taken"}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["details"]["field"] == "username"

    def test_keeping_own_username_is_allowed(self, client, auth_headers):
        resp = client.patch("/api/user/me", json={"username": "alice"}, headers=auth_headers)
        assert resp.status_code == 200


class TestDeleteMe:

    def test_removes_account_records_and_remote_namespace(self, client, register, remote, db):
        user_id, headers = register()
        folder = client.post("/api/folders", json={"name": "Docs"}, headers=headers).json()
        client.post(
            "/api/files",
            data={"name": "a.pdf", "folder_id": folder["folder_id"]},
            files={"file": ("a.pdf", PDF_BYTES, "application/pdf")},
            headers=headers,
        )

        resp = client.delete("/api/user/me", headers=headers)

        assert resp.status_code == 200
        assert remote.find_path("pdf-vault", user_id) is None
        assert db.query(User).count() == 0
        assert db.query(Folder).count() == 0
        assert db.query(StoredFile).count() == 0
        assert client.get("/api/user/me", headers=headers).status_code == 401

    def test_without_remote_namespace(self, client, register, db):
        _, headers = register()
        assert client.delete("/api/user/me", headers=headers).status_code == 200
        assert db.query(User).count() == 0

    def test_other_users_untouched(self, client, register, remote, db):
        other_id, other_headers = register(email="b@example.com", username="bobby")
        client.post("/api/folders", json={"name": "Keep"}, headers=other_headers)
        _, headers = register()

        client.delete("/api/user/me", headers=headers)

        assert db.query(User).count() == 1
        assert db.query(Folder).count() == 1
        assert remote.find_path("pdf-vault", other_id) is not None

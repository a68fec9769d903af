"""
Tests for the HTTP boundary: request shapes, camelCase responses and the
mapping of lifecycle errors to status codes.
"""
import inspect
from unittest.mock import patch

import pytest

from pastebin.errors import StorageError
from pastebin.models import MAX_EXPIRES_IN_MS
from pastebin.routes import pastes as paste_routes


def create(client, **body):
    body.setdefault("content", "hello from the api")
    response = client.post("/api/pastes", json=body)
    assert response.status_code == 201
    return response.json()["id"]


class TestCreateEndpoint:
    def test_returns_id_and_url(self, client):
        response = client.post("/api/pastes", json={"content": "hi"})

        assert response.status_code == 201
        data = response.json()
        assert len(data["id"]) == 8
        assert data["url"].endswith(f"/api/pastes/{data['id']}")

    def test_content_is_required(self, client):
        response = client.post("/api/pastes", json={"language": "python"})
        assert response.status_code == 422

    @pytest.mark.parametrize("offset", [10 ** 15, -(10 ** 15)])
    def test_expiry_offset_out_of_range_rejected(self, client, offset):
        response = client.post("/api/pastes", json={"content": "x", "expiresIn": offset})
        assert response.status_code == 422

    def test_longest_expiry_accepted(self, client):
        paste_id = create(client, expiresIn=MAX_EXPIRES_IN_MS)
        assert client.get(f"/api/preview/{paste_id}").json()["expiresAt"] is not None

    def test_storage_failure_is_500_without_details(self, client):
        with patch("pastebin.service.PasteService.create_paste", side_effect=StorageError()):
            response = client.post("/api/pastes", json={"content": "hi"})

        assert response.status_code == 500
        assert response.json() == {"detail": "Storage unavailable"}


class TestFetchEndpoint:
    def test_full_paste_in_camel_case(self, client):
        paste_id = create(client, content="print(1)", language="python", isPrivate=True)

        response = client.get(f"/api/pastes/{paste_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == paste_id
        assert data["content"] == "print(1)"
        assert data["language"] == "python"
        assert data["isPrivate"] is True
        assert data["burnAfterRead"] is False
        assert data["isEncrypted"] is False
        assert data["views"] == 0
        assert data["expiresAt"] is None
        assert "createdAt" in data
        assert "deleted" not in data

    def test_not_found(self, client):
        response = client.get("/api/pastes/00000000")
        assert response.status_code == 404
        assert response.json() == {"detail": "Paste not found"}

    def test_password_flow(self, client):
        paste_id = create(client, content="secret", password="pw")

        missing = client.get(f"/api/pastes/{paste_id}")
        assert missing.status_code == 401
        assert missing.json()["detail"] == "Password required for encrypted paste"

        wrong = client.get(f"/api/pastes/{paste_id}", params={"password": "nope"})
        assert wrong.status_code == 401
        assert wrong.json()["detail"] == "Invalid password"

        right = client.get(f"/api/pastes/{paste_id}", params={"password": "pw"})
        assert right.status_code == 200
        assert right.json()["content"] == "secret"
        assert right.json()["views"] == 0

    def test_burn_after_read(self, client):
        paste_id = create(client, burnAfterRead=True)

        assert client.get(f"/api/pastes/{paste_id}").status_code == 200
        assert client.get(f"/api/pastes/{paste_id}").status_code == 404

    def test_expired(self, client):
        paste_id = create(client, expiresIn=-1)

        assert client.get(f"/api/pastes/{paste_id}").status_code == 404
        assert client.get(f"/api/preview/{paste_id}").status_code == 404
        assert client.get("/api/pastes").json() == []


class TestPreviewAndListEndpoints:
    def test_preview_is_truncated_and_not_counted(self, client):
        paste_id = create(client, content="a" * 150)

        preview = client.get(f"/api/preview/{paste_id}").json()
        assert preview["content"] == "a" * 100 + "..."
        assert preview["views"] == 0

        assert client.get(f"/api/pastes/{paste_id}").json()["views"] == 0
        assert client.get(f"/api/preview/{paste_id}").json()["views"] == 1

    def test_list_newest_first(self, client, clock):
        first = create(client, content="first")
        clock.advance(seconds=1)
        second = create(client, content="second", password="pw", isPrivate=True)

        listed = client.get("/api/pastes").json()

        assert [item["id"] for item in listed] == [second, first]
        assert listed[0]["content"] == "[Encrypted Content]"
        assert listed[0]["isPrivate"] is True
        assert listed[0]["isEncrypted"] is True


class TestDeleteEndpoint:
    def test_delete_twice(self, client):
        paste_id = create(client)

        response = client.delete(f"/api/pastes/{paste_id}")
        assert response.status_code == 200
        assert response.json() == {"message": "Paste deleted successfully"}

        assert client.delete(f"/api/pastes/{paste_id}").status_code == 404
        assert client.get(f"/api/pastes/{paste_id}").status_code == 404


def test_health(client):
    assert client.get("/healthz").json() == {"ok": True}
    assert client.get("/api/healthz").json() == {"ok": True}


@pytest.mark.parametrize("handler", [
    paste_routes.create_paste,
    paste_routes.fetch_paste,
    paste_routes.list_pastes,
    paste_routes.preview_paste,
    paste_routes.delete_paste,
])
def test_paste_handlers_run_off_the_event_loop(handler):
    # Key derivation and the Redis client block, so handlers must be sync
    assert not inspect.iscoroutinefunction(handler)

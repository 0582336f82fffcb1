# tests/unit/test_trash/test_trash_router.py
"""HTTP contract for the trash and admin trash routers."""

import json
import uuid

import pytest

from noteflow.models import Note, TrashAuditLog
from noteflow.services.trash.errors import NotDeleted, TrashError

USER_ID = "user_alice"
ADMIN_HEADERS = {"X-API-Key": "test-admin-key"}


class TestAuthentication:
    def test_missing_identity_is_401(self, client):
        response = client.get("/v1/trash")

        assert response.status_code == 401
        assert response.json()["error_code"] == "unauthenticated"

    def test_health_is_open(self, client):
        assert client.get("/health").json()["status"] == "ok"


class TestNoteEndpoints:
    def test_delete_then_list(self, client, auth_headers, make_folder, make_note):
        folder = make_folder("Work")
        note = make_note("Plan", folder=folder)

        response = client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["is_deleted"] is True

        listing = client.get("/v1/trash", headers=auth_headers).json()
        assert listing["total"] == 1
        item = listing["notes"][0]
        assert item["title"] == "Plan"
        assert item["original_folder_name"] == "Work"
        assert item["days_remaining"] == 30
        assert item["urgency"] == "normal"

    def test_delete_twice_is_409(self, client, auth_headers, make_note):
        note = make_note()
        client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)

        response = client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["error_code"] == "already_deleted"

    def test_foreign_note_is_404(self, client, auth_headers, make_note):
        note = make_note(user_id="user_bob")

        response = client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"detail": "Note not found", "error_code": "not_found"}

    def test_restore_without_body(self, client, auth_headers, make_folder, make_note):
        folder = make_folder()
        note = make_note(folder=folder)
        client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)

        response = client.post(f"/v1/trash/notes/{note.id}/restore", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["restored_to_folder_id"] == str(folder.id)
        assert body["restored_to_original"] is True
        assert body["note"]["is_deleted"] is False

    def test_restore_to_explicit_folder(self, client, auth_headers, make_folder, make_note):
        note = make_note(folder=make_folder("A"))
        target = make_folder("B")
        client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)

        response = client.post(
            f"/v1/trash/notes/{note.id}/restore",
            json={"target_folder_id": str(target.id)},
            headers=auth_headers,
        )

        assert response.json()["restored_to_folder_id"] == str(target.id)
        assert response.json()["restored_to_original"] is False

    def test_restore_live_note_is_409(self, client, auth_headers, make_note):
        note = make_note()

        response = client.post(f"/v1/trash/notes/{note.id}/restore", headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["error_code"] == "not_deleted"

    def test_permanent_delete(self, client, auth_headers, db, make_note):
        note = make_note()
        note_id = note.id

        response = client.delete(f"/v1/trash/notes/{note_id}/permanent", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"id": str(note_id), "deleted": True, "child_notes_deleted": 0}
        assert db.query(Note).filter(Note.id == note_id).count() == 0

    def test_malformed_id_is_422(self, client, auth_headers):
        response = client.delete("/v1/trash/notes/not-a-uuid", headers=auth_headers)
        assert response.status_code == 422


class TestBulkEndpoints:
    def test_bulk_restore_counts(self, client, auth_headers, make_note):
        notes = [make_note(f"n{i}") for i in range(3)]
        for note in notes[:2]:
            client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)

        response = client.post(
            "/v1/trash/notes/bulk-restore",
            json={"note_ids": [str(n.id) for n in notes]},
            headers=auth_headers,
        )

        body = response.json()
        assert response.status_code == 200
        assert (body["succeeded"], body["failed"]) == (2, 1)
        assert body["results"][2]["reason"] == "not_found_or_not_deleted"

    def test_empty_batch_is_422(self, client, auth_headers):
        response = client.post("/v1/trash/notes/bulk-delete", json={"note_ids": []}, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["error_code"] == "validation_error"

    def test_oversized_batch_is_422(self, client, auth_headers):
        ids = [str(uuid.uuid4()) for _ in range(101)]

        response = client.post("/v1/trash/notes/bulk-restore", json={"note_ids": ids}, headers=auth_headers)

        assert response.status_code == 422

    def test_empty_trash(self, client, auth_headers, db, make_note):
        note = make_note()
        client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)

        response = client.post("/v1/trash/empty", headers=auth_headers)

        assert response.json() == {"notes_deleted": 1, "folders_deleted": 0, "errors": []}
        assert db.query(TrashAuditLog).filter(TrashAuditLog.action == "empty_trash").count() == 1


class TestFolderEndpoints:
    def test_delete_folder_moves_notes_by_default(self, client, auth_headers, make_folder, make_note):
        folder = make_folder()
        make_note(folder=folder)

        response = client.delete(f"/v1/trash/folders/{folder.id}", headers=auth_headers)

        body = response.json()
        assert body["folder"]["is_deleted"] is True
        assert (body["notes_deleted"], body["notes_moved_to_root"]) == (0, 1)

    def test_delete_folder_with_contents(self, client, auth_headers, make_folder, make_note):
        folder = make_folder()
        make_note(folder=folder)

        response = client.delete(f"/v1/trash/folders/{folder.id}?delete_contents=true", headers=auth_headers)

        assert response.json()["notes_deleted"] == 1
        folders = client.get("/v1/trash/folders", headers=auth_headers).json()
        assert folders[0]["note_count"] == 1

    def test_restore_and_purge_folder(self, client, auth_headers, make_folder, make_note):
        folder = make_folder()
        make_note(folder=folder)
        client.delete(f"/v1/trash/folders/{folder.id}?delete_contents=true", headers=auth_headers)

        restored = client.post(f"/v1/trash/folders/{folder.id}/restore", headers=auth_headers)
        assert restored.json()["is_deleted"] is False

        purged = client.delete(f"/v1/trash/folders/{folder.id}/permanent", headers=auth_headers)
        assert purged.json()["child_notes_deleted"] == 1


class TestAuditEndpoints:
    def test_own_audit_log(self, client, auth_headers, make_note):
        note = make_note()
        client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)

        body = client.get("/v1/trash/audit", headers=auth_headers).json()

        assert body["total"] == 1
        assert body["entries"][0]["action"] == "soft_delete"
        assert body["entries"][0]["metadata"] == {"deletedFromFolderId": None}

    def test_other_users_log_is_403(self, client, auth_headers):
        response = client.get("/v1/trash/audit?user_id=user_bob", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["error_code"] == "unauthorized"

    def test_stats(self, client, auth_headers, make_note):
        note = make_note()
        client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)
        client.post(f"/v1/trash/notes/{note.id}/restore", headers=auth_headers)

        body = client.get("/v1/trash/audit/stats", headers=auth_headers).json()

        assert body["total_restores"] == 1
        assert body["by_action"] == {"soft_delete": 1, "restore": 1}


class TestAdminEndpoints:
    def test_requires_api_key(self, client):
        assert client.get("/v1/admin/trash/status").status_code == 401
        assert client.get("/v1/admin/trash/status", headers={"X-API-Key": "wrong"}).status_code == 401

    def test_fails_closed_without_configured_key(self, client):
        from noteflow.config import get_settings
        from noteflow.main import app

        unset = get_settings().model_copy(update={"ADMIN_API_KEY": None})
        app.dependency_overrides[get_settings] = lambda: unset

        response = client.get("/v1/admin/trash/status", headers=ADMIN_HEADERS)

        assert response.status_code == 500

    def test_status(self, client, auth_headers, make_note):
        note = make_note()
        client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)

        body = client.get("/v1/admin/trash/status", headers=ADMIN_HEADERS).json()

        assert body["notes_in_trash"] == 1
        assert body["policy"]["retention_days"] == 30

    def test_sweep(self, client, auth_headers, clock, make_note):
        note = make_note()
        client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)
        clock.advance(days=31)

        preview = client.post("/v1/admin/trash/sweep/preview", headers=ADMIN_HEADERS).json()
        assert (preview["dry_run"], preview["notes_deleted"]) == (True, 1)

        result = client.post("/v1/admin/trash/sweep", headers=ADMIN_HEADERS).json()
        assert (result["success"], result["notes_deleted"]) == (True, 1)

    def test_global_audit_requires_admin_role(self, client):
        response = client.get(
            "/v1/admin/trash/audit",
            headers={**ADMIN_HEADERS, "X-User-Email": "alice@example.com"},
        )
        assert response.status_code == 403

    def test_global_audit_for_admin(self, client, db, clock, auth_headers, make_note):
        from noteflow.services.trash.admin_role_service import grant_admin_role

        grant_admin_role(db, "user_admin", "ops@example.com", clock=clock)
        note = make_note()
        client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)

        response = client.get(
            "/v1/admin/trash/audit",
            headers={**ADMIN_HEADERS, "X-User-Email": "ops@example.com"},
        )

        assert response.status_code == 200
        assert response.json()["entries"][0]["user_id"] == USER_ID

    def test_audit_purge_requires_confirm(self, client):
        response = client.post("/v1/admin/trash/audit/purge", json={}, headers=ADMIN_HEADERS)
        assert response.status_code == 400

    def test_audit_purge_dry_run(self, client, auth_headers, clock, make_note):
        note = make_note()
        client.delete(f"/v1/trash/notes/{note.id}", headers=auth_headers)
        clock.advance(days=400)

        response = client.post("/v1/admin/trash/audit/purge", json={"dry_run": True}, headers=ADMIN_HEADERS)

        assert response.json()["entries_deleted"] == 1


class TestErrorHandler:
    @pytest.mark.asyncio
    async def test_maps_status_and_code(self):
        from starlette.requests import Request

        from noteflow.main import app

        handler = app.exception_handlers[TrashError]
        request = Request(
            {"type": "http", "method": "POST", "path": "/v1/trash/notes/x/restore", "headers": [], "query_string": b""}
        )

        response = await handler(request, NotDeleted())

        assert response.status_code == 409
        assert json.loads(response.body) == {"detail": "Item is not in the trash", "error_code": "not_deleted"}

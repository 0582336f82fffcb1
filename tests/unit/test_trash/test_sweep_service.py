# tests/unit/test_trash/test_sweep_service.py
"""Unit tests for the retention sweeper."""

from datetime import timedelta

import pytest

from noteflow.models import Folder, Note, NoteTag, TrashAuditLog
from noteflow.services.trash import sweep_service
from noteflow.services.trash.sweep_service import (
    RetentionSweeper,
    SweepState,
    preview_retention_sweep,
    run_retention_sweep,
)
from noteflow.services.trash.soft_delete_service import restore_note, soft_delete_folder, soft_delete_note

USER_ID = "user_alice"


def _auto_deletes(db):
    return db.query(TrashAuditLog).filter(TrashAuditLog.action == "auto_delete").all()


class TestExpiry:
    """What the sweeper does and does not consider expired."""

    def test_leaves_items_inside_window(self, db, clock, make_note):
        note = make_note()
        soft_delete_note(db, note.id, USER_ID, clock=clock)
        clock.advance(days=29, hours=23)

        result = run_retention_sweep(db, clock=clock)

        assert result.notes_deleted == 0
        assert db.query(Note).count() == 1

    def test_purges_items_past_window(self, db, clock, make_note):
        note = make_note()
        soft_delete_note(db, note.id, USER_ID, clock=clock)
        clock.advance(days=30, seconds=1)

        result = run_retention_sweep(db, clock=clock)

        assert result.notes_deleted == 1
        assert db.query(Note).count() == 0

    def test_never_touches_live_notes_outside_trashed_folders(self, db, clock, make_note):
        make_note()
        clock.advance(days=400)

        result = run_retention_sweep(db, clock=clock)

        assert result.notes_deleted == 0
        assert db.query(Note).count() == 1

    def test_legacy_row_without_timestamp_is_purged(self, db, clock, make_note):
        note = make_note()
        db.query(Note).filter(Note.id == note.id).update({"is_deleted": True, "deleted_at": None})
        db.commit()

        result = run_retention_sweep(db, clock=clock)

        assert result.notes_deleted == 1

    def test_purges_tag_links(self, db, clock, make_note):
        from noteflow.services.notes_service import create_tag, tag_note

        note = make_note()
        tag_note(db, note.id, create_tag(db, USER_ID, "work").id)
        soft_delete_note(db, note.id, USER_ID, clock=clock)
        clock.advance(days=31)

        run_retention_sweep(db, clock=clock)

        assert db.query(NoteTag).count() == 0


class TestAuditTrail:
    """Every purge leaves an auto_delete entry behind."""

    def test_note_entry(self, db, clock, make_note):
        note = make_note("Old draft")
        note_id = note.id
        soft_delete_note(db, note_id, USER_ID, clock=clock)
        deleted_at = clock.now()
        clock.advance(days=31)

        run_retention_sweep(db, clock=clock)

        (entry,) = _auto_deletes(db)
        assert entry.user_id == USER_ID
        assert entry.item_type == "note"
        assert entry.item_id == str(note_id)
        assert entry.item_title == "Old draft"
        assert entry.timestamp == clock.now()
        assert entry.event_metadata["deletedAt"] == deleted_at.isoformat()
        assert entry.event_metadata["expirationDate"] == (clock.now() - timedelta(days=30)).isoformat()

    def test_folder_with_contents(self, db, clock, make_folder, make_note):
        """Folder trashed with two notes: three entries, folder counts both children."""
        folder = make_folder("Projects")
        folder_id = folder.id
        make_note("A", folder=folder)
        make_note("B", folder=folder)
        soft_delete_folder(db, folder_id, USER_ID, delete_contents=True, clock=clock)
        clock.advance(days=31)

        result = run_retention_sweep(db, clock=clock)

        assert result.notes_deleted == 2
        assert result.folders_deleted == 1
        assert result.cascaded_notes_deleted == 0
        entries = _auto_deletes(db)
        assert len(entries) == 3
        (folder_entry,) = [e for e in entries if e.item_type == "folder"]
        assert folder_entry.item_id == str(folder_id)
        assert folder_entry.event_metadata["childNotesCount"] == 2
        assert db.query(Folder).count() == 0
        assert db.query(Note).count() == 0

    def test_residual_live_child_is_cascaded(self, db, clock, make_folder, make_note):
        folder = make_folder("Projects")
        folder_id = folder.id
        note = make_note("Stray", folder=folder)
        note_id = note.id
        soft_delete_folder(db, folder_id, USER_ID, delete_contents=True, clock=clock)
        # Restoring with an explicit target leaves a live note in a trashed folder
        restore_note(db, note_id, USER_ID, target_folder_id=folder_id, clock=clock)
        clock.advance(days=31)

        result = run_retention_sweep(db, clock=clock)

        assert result.notes_deleted == 0
        assert result.folders_deleted == 1
        assert result.cascaded_notes_deleted == 1
        note_entry = next(e for e in _auto_deletes(db) if e.item_type == "note")
        assert note_entry.item_id == str(note_id)
        assert note_entry.event_metadata["cascadeFromFolderId"] == str(folder_id)
        folder_entry = next(e for e in _auto_deletes(db) if e.item_type == "folder")
        assert folder_entry.event_metadata["childNotesCount"] == 1

    def test_entries_outlive_the_items(self, db, clock, make_note):
        note = make_note()
        soft_delete_note(db, note.id, USER_ID, clock=clock)
        clock.advance(days=31)

        run_retention_sweep(db, clock=clock)

        assert db.query(Note).count() == 0
        assert len(_auto_deletes(db)) == 1


class TestIdempotence:
    def test_second_run_is_a_no_op(self, db, clock, make_folder, make_note):
        folder = make_folder()
        make_note(folder=folder)
        soft_delete_folder(db, folder.id, USER_ID, delete_contents=True, clock=clock)
        clock.advance(days=31)

        first = run_retention_sweep(db, clock=clock)
        second = run_retention_sweep(db, clock=clock)

        assert (first.notes_deleted, first.folders_deleted) == (1, 1)
        assert (second.notes_deleted, second.folders_deleted) == (0, 0)
        assert len(_auto_deletes(db)) == 2

    def test_failed_item_is_retried_next_run(self, db, clock, make_note, monkeypatch):
        stuck = make_note("Stuck")
        other = make_note("Other")
        stuck_id = stuck.id
        for note in (stuck, other):
            soft_delete_note(db, note.id, USER_ID, clock=clock)
        clock.advance(days=31)

        real_hard_delete = sweep_service.hard_delete_note

        def flaky_hard_delete(db, note_id):
            if note_id == stuck_id:
                raise RuntimeError("lock timeout")
            return real_hard_delete(db, note_id)

        monkeypatch.setattr(sweep_service, "hard_delete_note", flaky_hard_delete)
        first = run_retention_sweep(db, clock=clock)

        assert first.success is False
        assert first.notes_deleted == 1
        assert len(first.errors) == 1
        assert db.query(Note).filter(Note.id == stuck_id).count() == 1

        monkeypatch.setattr(sweep_service, "hard_delete_note", real_hard_delete)
        second = run_retention_sweep(db, clock=clock)

        assert second.success is True
        assert second.notes_deleted == 1
        assert db.query(Note).count() == 0


class TestSweeperState:
    def test_purging_during_run_and_idle_after(self, db, clock, make_note, monkeypatch):
        note = make_note()
        soft_delete_note(db, note.id, USER_ID, clock=clock)
        clock.advance(days=31)
        sweeper = RetentionSweeper(db, clock=clock)
        seen = []
        real_hard_delete = sweep_service.hard_delete_note

        def watching_hard_delete(db, note_id):
            seen.append(sweeper.state)
            return real_hard_delete(db, note_id)

        monkeypatch.setattr(sweep_service, "hard_delete_note", watching_hard_delete)
        sweeper.run()

        assert seen == [SweepState.PURGING]
        assert sweeper.state == SweepState.IDLE

    def test_idle_after_unexpected_failure(self, db, clock, monkeypatch):
        sweeper = RetentionSweeper(db, clock=clock)

        def broken_scan(threshold):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(sweeper, "_expired_notes", broken_scan)

        with pytest.raises(RuntimeError):
            sweeper.run()
        assert sweeper.state == SweepState.IDLE


class TestPreview:
    def test_counts_without_writing(self, db, clock, make_folder, make_note):
        folder = make_folder()
        make_note("A", folder=folder)
        stray = make_note("Stray", folder=folder)
        soft_delete_folder(db, folder.id, USER_ID, delete_contents=True, clock=clock)
        restore_note(db, stray.id, USER_ID, target_folder_id=folder.id, clock=clock)
        clock.advance(days=31)

        result = preview_retention_sweep(db, clock=clock)

        assert result.dry_run is True
        assert (result.notes_deleted, result.folders_deleted, result.cascaded_notes_deleted) == (1, 1, 1)
        assert db.query(Note).count() == 2
        assert db.query(TrashAuditLog).count() == 0

    def test_summary(self, db, clock):
        result = run_retention_sweep(db, clock=clock)
        assert result.summary() == {"notes_deleted": 0, "folders_deleted": 0, "timestamp": clock.now()}

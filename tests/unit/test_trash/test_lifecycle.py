# tests/unit/test_trash/test_lifecycle.py
"""Unit tests for the tagged lifecycle state and its column mapping."""

import uuid
from datetime import datetime

from noteflow.lifecycle import ACTIVE, Active, Deleted, from_columns

NOW = datetime(2025, 1, 1, 12, 0, 0)


class TestToColumns:
    def test_active_clears_every_deletion_column(self):
        assert ACTIVE.to_columns() == {"is_deleted": False, "deleted_at": None, "deleted_from_folder_id": None}

    def test_deleted_sets_flag_and_timestamp_together(self):
        folder_id = uuid.uuid4()
        columns = Deleted(at=NOW, from_folder_id=folder_id).to_columns()

        assert columns == {"is_deleted": True, "deleted_at": NOW, "deleted_from_folder_id": folder_id}

    def test_folders_have_no_origin_column(self):
        assert "deleted_from_folder_id" not in Deleted(at=NOW).to_columns(track_origin=False)
        assert "deleted_from_folder_id" not in ACTIVE.to_columns(track_origin=False)


class TestFromColumns:
    def test_round_trip_deleted(self):
        folder_id = uuid.uuid4()
        assert from_columns(True, NOW, folder_id) == Deleted(at=NOW, from_folder_id=folder_id)

    def test_not_deleted_is_active_whatever_else_is_stored(self):
        assert isinstance(from_columns(False, NOW, uuid.uuid4()), Active)
        assert isinstance(from_columns(None, None), Active)

    def test_legacy_row_without_timestamp_is_long_deleted(self):
        state = from_columns(True, None)
        assert state == Deleted(at=datetime.min)


class TestEntityProperty:
    """The ORM lifecycle property writes the column triple as one value."""

    def test_note_round_trip(self):
        from noteflow.models import Note

        folder_id = uuid.uuid4()
        note = Note(title="x", user_id="u")
        note.lifecycle = Deleted(at=NOW, from_folder_id=folder_id)

        assert note.is_deleted is True
        assert note.deleted_at == NOW
        assert note.deleted_from_folder_id == folder_id
        assert note.lifecycle == Deleted(at=NOW, from_folder_id=folder_id)

        note.lifecycle = ACTIVE
        assert note.is_deleted is False
        assert note.deleted_at is None
        assert note.deleted_from_folder_id is None

    def test_folder_round_trip(self):
        from noteflow.models import Folder

        folder = Folder(name="f", user_id="u")
        folder.lifecycle = Deleted(at=NOW)

        assert folder.is_deleted is True
        assert folder.lifecycle == Deleted(at=NOW)

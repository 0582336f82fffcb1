# tests/unit/test_trash/test_notes_service.py
"""Normal listings never include trashed items."""

import pytest

from noteflow.services.notes_service import (
    create_folder,
    create_tag,
    list_folders,
    list_notes,
    move_note,
    tag_note,
    tags_for_note,
)
from noteflow.services.trash.errors import NotFound, ValidationError
from noteflow.services.trash.soft_delete_service import soft_delete_folder, soft_delete_note

USER_ID = "user_alice"


def test_list_notes_skips_trashed(db, clock, make_note):
    keep = make_note("Keep")
    gone = make_note("Gone")
    soft_delete_note(db, gone.id, USER_ID, clock=clock)

    assert [n.id for n in list_notes(db, USER_ID)] == [keep.id]


def test_list_folders_skips_trashed(db, clock, make_folder):
    make_folder("Keep")
    gone = make_folder("Gone")
    soft_delete_folder(db, gone.id, USER_ID, clock=clock)

    assert [f.name for f in list_folders(db, USER_ID)] == ["Keep"]


def test_list_notes_by_folder(db, make_folder, make_note):
    folder = make_folder()
    make_note("Inside", folder=folder)
    make_note("Outside")

    assert [n.title for n in list_notes(db, USER_ID, folder_id=folder.id)] == ["Inside"]


def test_folder_name_required(db, clock):
    with pytest.raises(ValidationError):
        create_folder(db, USER_ID, "  ", clock=clock)


def test_move_trashed_note_is_not_found(db, clock, make_folder, make_note):
    note = make_note()
    soft_delete_note(db, note.id, USER_ID, clock=clock)

    with pytest.raises(NotFound):
        move_note(db, note.id, USER_ID, make_folder().id)


def test_tagging_is_idempotent(db, make_note):
    note = make_note()
    first = create_tag(db, USER_ID, "work")
    second = create_tag(db, USER_ID, "work")
    tag_note(db, note.id, first.id)
    tag_note(db, note.id, second.id)

    assert first.id == second.id
    assert [t.name for t in tags_for_note(db, note.id)] == ["work"]

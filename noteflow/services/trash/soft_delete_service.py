# noteflow/services/trash/soft_delete_service.py
"""
Single-entity lifecycle primitives for notes and folders.

Every state change is one conditional UPDATE guarded on the current
is_deleted value, so two writers racing on the same row cannot both win:
- a second soft delete sees zero rows updated and reports AlreadyDeleted,
  leaving the first deleted_at untouched
- a restore that loses to a purge sees zero rows and reports NotFound

Lookups are scoped to the caller, so a foreign-owned id is reported exactly
like a missing one.

These functions do not write audit entries; trash_service does that.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from noteflow.clock import Clock, system_clock
from noteflow.lifecycle import ACTIVE, Deleted
from noteflow.models import Folder, Note, NoteTag
from noteflow.services.trash.errors import AlreadyDeleted, NotDeleted, NotFound
from noteflow.services.trash.restore_resolver import resolve_restore_target

logger = logging.getLogger(__name__)


@dataclass
class ItemSnapshot:
    """What an entity looked like just before a lifecycle change."""

    id: uuid.UUID
    title: str
    folder_id: uuid.UUID | None = None
    deleted_at: datetime | None = None


@dataclass
class RestoreResult:
    note: Note
    restored_to_folder_id: uuid.UUID | None
    original_folder_id: uuid.UUID | None


@dataclass
class FolderDeleteResult:
    folder: Folder
    notes_deleted: list[ItemSnapshot]
    notes_moved: int = 0


@dataclass
class FolderPurgeResult:
    folder: ItemSnapshot
    notes_purged: list[ItemSnapshot]


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _load_note(db: Session, note_id: uuid.UUID, user_id: str) -> Note:
    note = db.query(Note).filter(Note.id == note_id, Note.user_id == user_id).first()
    if note is None:
        raise NotFound("Note not found")
    return note


def _load_folder(db: Session, folder_id: uuid.UUID, user_id: str) -> Folder:
    folder = db.query(Folder).filter(Folder.id == folder_id, Folder.user_id == user_id).first()
    if folder is None:
        raise NotFound("Folder not found")
    return folder


def _stored_is_deleted(db: Session, model, entity_id: uuid.UUID, user_id: str) -> bool | None:
    """Read is_deleted straight from the store; None if the row is gone."""
    row = db.query(model.is_deleted).filter(model.id == entity_id, model.user_id == user_id).first()
    return None if row is None else bool(row.is_deleted)


def _snapshot_note(note: Note) -> ItemSnapshot:
    return ItemSnapshot(id=note.id, title=note.title, folder_id=note.folder_id, deleted_at=note.deleted_at)


def hard_delete_note(db: Session, note_id: uuid.UUID) -> bool:
    """
    Remove a note row and its tag associations. Does not commit.

    Returns False if the note was already gone, which makes repeat purges a
    no-op.
    """
    db.query(NoteTag).filter(NoteTag.note_id == note_id).delete(synchronize_session=False)
    deleted = db.query(Note).filter(Note.id == note_id).delete(synchronize_session=False)
    return deleted > 0


def hard_delete_folder(db: Session, folder_id: uuid.UUID) -> bool:
    """Remove a folder row. Does not commit."""
    return db.query(Folder).filter(Folder.id == folder_id).delete(synchronize_session=False) > 0


# -----------------------------------------------------------------------------
# Notes
# -----------------------------------------------------------------------------


def soft_delete_note(db: Session, note_id: uuid.UUID, user_id: str, clock: Clock = system_clock) -> Note:
    """
    Move a note to the trash, remembering its current folder.

    Raises:
        NotFound: note missing or owned by someone else
        AlreadyDeleted: note is already in the trash
    """
    note = _load_note(db, note_id, user_id)
    if note.is_deleted:
        raise AlreadyDeleted("Note is already in the trash")

    state = Deleted(at=clock.now(), from_folder_id=note.folder_id)
    updated = (
        db.query(Note)
        .filter(Note.id == note.id, Note.user_id == user_id, Note.is_deleted == False)
        .update(state.to_columns(), synchronize_session=False)
    )
    if updated == 0:
        db.rollback()
        if _stored_is_deleted(db, Note, note_id, user_id) is None:
            raise NotFound("Note not found")
        raise AlreadyDeleted("Note is already in the trash")

    db.commit()
    logger.info(f"Soft deleted note {note_id}", extra={"user_id": user_id, "item_id": str(note_id)})
    return note


def restore_note(
    db: Session,
    note_id: uuid.UUID,
    user_id: str,
    target_folder_id: uuid.UUID | None = None,
    clock: Clock = system_clock,
    commit: bool = True,
) -> RestoreResult:
    """
    Bring a note back out of the trash.

    Without target_folder_id the note returns to the folder it was deleted
    from when that folder is still live, otherwise to root.
    With commit=False the update stays pending in the session.

    Raises:
        NotFound: note missing, foreign, or purged while restoring
        NotDeleted: note is not in the trash
    """
    note = _load_note(db, note_id, user_id)
    if not note.is_deleted:
        raise NotDeleted("Note is not in the trash")

    original_folder_id = note.deleted_from_folder_id
    target = resolve_restore_target(db, original_folder_id, target_folder_id)

    values = ACTIVE.to_columns()
    values["folder_id"] = target
    values["updated_at"] = clock.now()
    updated = (
        db.query(Note)
        .filter(Note.id == note.id, Note.user_id == user_id, Note.is_deleted == True)
        .update(values, synchronize_session=False)
    )
    if updated == 0:
        db.rollback()
        if _stored_is_deleted(db, Note, note_id, user_id) is None:
            raise NotFound("Note not found")
        raise NotDeleted("Note is not in the trash")

    if commit:
        db.commit()
    logger.info(
        f"Restored note {note_id} to folder {target}",
        extra={"user_id": user_id, "item_id": str(note_id)},
    )
    return RestoreResult(note=note, restored_to_folder_id=target, original_folder_id=original_folder_id)


def purge_note(db: Session, note_id: uuid.UUID, user_id: str, commit: bool = True) -> ItemSnapshot:
    """
    Permanently delete a note and its tag associations, whatever its state.
    Leaves the transaction open when commit is False.

    Raises:
        NotFound: note missing or owned by someone else
    """
    note = _load_note(db, note_id, user_id)
    snapshot = _snapshot_note(note)

    if not hard_delete_note(db, note.id):
        db.rollback()
        raise NotFound("Note not found")

    if commit:
        db.commit()
    db.expunge(note)
    logger.info(f"Purged note {note_id}", extra={"user_id": user_id, "item_id": str(note_id)})
    return snapshot


# -----------------------------------------------------------------------------
# Folders
# -----------------------------------------------------------------------------


def soft_delete_folder(
    db: Session,
    folder_id: uuid.UUID,
    user_id: str,
    delete_contents: bool = False,
    clock: Clock = system_clock,
) -> FolderDeleteResult:
    """
    Move a folder to the trash.

    With delete_contents, the folder's live notes go to the trash too and
    remember this folder as their origin. Otherwise they move to root and stay
    live. Notes already in the trash are left alone either way.

    Raises:
        NotFound: folder missing or owned by someone else
        AlreadyDeleted: folder is already in the trash
    """
    folder = _load_folder(db, folder_id, user_id)
    if folder.is_deleted:
        raise AlreadyDeleted("Folder is already in the trash")

    now = clock.now()
    updated = (
        db.query(Folder)
        .filter(Folder.id == folder.id, Folder.user_id == user_id, Folder.is_deleted == False)
        .update(Deleted(at=now).to_columns(track_origin=False), synchronize_session=False)
    )
    if updated == 0:
        db.rollback()
        if _stored_is_deleted(db, Folder, folder_id, user_id) is None:
            raise NotFound("Folder not found")
        raise AlreadyDeleted("Folder is already in the trash")

    live_notes = db.query(Note).filter(
        Note.folder_id == folder.id,
        Note.user_id == user_id,
        Note.is_deleted == False,
    )
    result = FolderDeleteResult(folder=folder, notes_deleted=[])

    if delete_contents:
        result.notes_deleted = [
            ItemSnapshot(id=n.id, title=n.title, folder_id=n.folder_id, deleted_at=now)
            for n in live_notes.all()
        ]
        if result.notes_deleted:
            (
                db.query(Note)
                .filter(Note.id.in_([n.id for n in result.notes_deleted]), Note.is_deleted == False)
                .update(Deleted(at=now, from_folder_id=folder.id).to_columns(), synchronize_session=False)
            )
    else:
        result.notes_moved = live_notes.update({"folder_id": None}, synchronize_session=False)

    db.commit()
    logger.info(
        f"Soft deleted folder {folder_id}: {len(result.notes_deleted)} notes trashed, "
        f"{result.notes_moved} moved to root",
        extra={"user_id": user_id, "item_id": str(folder_id)},
    )
    return result


def restore_folder(db: Session, folder_id: uuid.UUID, user_id: str) -> Folder:
    """
    Bring a folder back out of the trash.

    Notes deleted with the folder stay in the trash and keep their origin, so
    restoring them afterwards lands them back here.

    Raises:
        NotFound: folder missing, foreign, or purged while restoring
        NotDeleted: folder is not in the trash
    """
    folder = _load_folder(db, folder_id, user_id)
    if not folder.is_deleted:
        raise NotDeleted("Folder is not in the trash")

    updated = (
        db.query(Folder)
        .filter(Folder.id == folder.id, Folder.user_id == user_id, Folder.is_deleted == True)
        .update(ACTIVE.to_columns(track_origin=False), synchronize_session=False)
    )
    if updated == 0:
        db.rollback()
        if _stored_is_deleted(db, Folder, folder_id, user_id) is None:
            raise NotFound("Folder not found")
        raise NotDeleted("Folder is not in the trash")

    db.commit()
    logger.info(f"Restored folder {folder_id}", extra={"user_id": user_id, "item_id": str(folder_id)})
    return folder


def purge_folder(db: Session, folder_id: uuid.UUID, user_id: str) -> FolderPurgeResult:
    """
    Permanently delete a folder and every note still filed under it.

    Raises:
        NotFound: folder missing or owned by someone else
    """
    folder = _load_folder(db, folder_id, user_id)
    folder_snapshot = ItemSnapshot(id=folder.id, title=folder.name, deleted_at=folder.deleted_at)

    children = db.query(Note).filter(Note.folder_id == folder.id, Note.user_id == user_id).all()
    purged = []
    for note in children:
        snapshot = _snapshot_note(note)
        if hard_delete_note(db, note.id):
            purged.append(snapshot)
        db.expunge(note)

    if not hard_delete_folder(db, folder.id):
        db.rollback()
        raise NotFound("Folder not found")

    db.commit()
    db.expunge(folder)
    logger.info(
        f"Purged folder {folder_id} with {len(purged)} notes",
        extra={"user_id": user_id, "item_id": str(folder_id), "notes_deleted": len(purged)},
    )
    return FolderPurgeResult(folder=folder_snapshot, notes_purged=purged)

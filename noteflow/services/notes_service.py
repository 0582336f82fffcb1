# noteflow/services/notes_service.py
"""
Minimal note, folder and tag operations.

Just enough of the editor-facing data layer for the trash to have something
to act on: creating entities, filing notes, tagging, and the normal listings,
which never include trashed items.
"""

import logging
import uuid

from sqlalchemy.orm import Session

from noteflow.clock import Clock, system_clock
from noteflow.models import Folder, Note, NoteTag, Tag
from noteflow.services.trash.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)


def create_folder(
    db: Session,
    user_id: str,
    name: str,
    parent_id: uuid.UUID | None = None,
    color: str | None = None,
    clock: Clock = system_clock,
) -> Folder:
    if not name or not name.strip():
        raise ValidationError("Folder name is required")

    now = clock.now()
    folder = Folder(
        user_id=user_id,
        name=name.strip(),
        parent_id=parent_id,
        color=color,
        created_at=now,
        updated_at=now,
    )
    db.add(folder)
    db.commit()
    db.refresh(folder)
    return folder


def create_note(
    db: Session,
    user_id: str,
    title: str,
    content: str = "",
    folder_id: uuid.UUID | None = None,
    clock: Clock = system_clock,
) -> Note:
    now = clock.now()
    note = Note(
        user_id=user_id,
        title=title or "Untitled",
        content=content,
        folder_id=folder_id,
        created_at=now,
        updated_at=now,
    )
    db.add(note)
    db.commit()
    db.refresh(note)
    logger.debug(f"Created note {note.id} for user {user_id}")
    return note


def move_note(db: Session, note_id: uuid.UUID, user_id: str, folder_id: uuid.UUID | None) -> Note:
    """File a live note under another folder (or root)."""
    note = (
        db.query(Note)
        .filter(Note.id == note_id, Note.user_id == user_id, Note.is_deleted == False)
        .first()
    )
    if note is None:
        raise NotFound("Note not found")
    note.folder_id = folder_id
    db.commit()
    return note


def list_notes(db: Session, user_id: str, folder_id: uuid.UUID | None = None) -> list[Note]:
    """Live notes only, pinned first then most recently updated."""
    query = db.query(Note).filter(Note.user_id == user_id, Note.is_deleted == False)
    if folder_id is not None:
        query = query.filter(Note.folder_id == folder_id)
    return query.order_by(Note.is_pinned.desc(), Note.updated_at.desc()).all()


def list_folders(db: Session, user_id: str) -> list[Folder]:
    return (
        db.query(Folder)
        .filter(Folder.user_id == user_id, Folder.is_deleted == False)
        .order_by(Folder.name)
        .all()
    )


# -----------------------------------------------------------------------------
# Tags
# -----------------------------------------------------------------------------


def create_tag(db: Session, user_id: str, name: str, color: str | None = None) -> Tag:
    existing = db.query(Tag).filter(Tag.user_id == user_id, Tag.name == name).first()
    if existing:
        return existing

    tag = Tag(user_id=user_id, name=name, color=color)
    db.add(tag)
    db.commit()
    db.refresh(tag)
    return tag


def tag_note(db: Session, note_id: uuid.UUID, tag_id: uuid.UUID) -> NoteTag:
    link = db.query(NoteTag).filter(NoteTag.note_id == note_id, NoteTag.tag_id == tag_id).first()
    if link:
        return link

    link = NoteTag(note_id=note_id, tag_id=tag_id)
    db.add(link)
    db.commit()
    return link


def tags_for_note(db: Session, note_id: uuid.UUID) -> list[Tag]:
    return (
        db.query(Tag)
        .join(NoteTag, NoteTag.tag_id == Tag.id)
        .filter(NoteTag.note_id == note_id)
        .order_by(Tag.name)
        .all()
    )

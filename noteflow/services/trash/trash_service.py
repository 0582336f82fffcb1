# noteflow/services/trash/trash_service.py
"""
User-facing trash operations.

Thin layer over the store primitives that adds the audit trail and the
trash listing view. Every function takes the caller's verified user id;
ownership is enforced below, in soft_delete_service.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from noteflow.clock import Clock, system_clock
from noteflow.models import AuditAction, Folder, ItemType, Note, TrashAuditLog
from noteflow.services.trash import audit_service, bulk_service, soft_delete_service
from noteflow.services.trash.admin_role_service import is_admin
from noteflow.services.trash.errors import Unauthorized
from noteflow.services.trash.policy_service import RetentionPolicy, Urgency
from noteflow.services.trash.restore_resolver import is_restoring_to_original

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Listing
# -----------------------------------------------------------------------------


@dataclass
class DeletedNoteView:
    """A trashed note plus everything the trash UI shows about it."""

    id: uuid.UUID
    title: str
    content: str
    folder_id: uuid.UUID | None
    deleted_at: datetime
    deleted_from_folder_id: uuid.UUID | None
    original_folder_name: str | None
    expires_at: datetime
    days_remaining: int
    urgency: Urgency
    expiration_message: str


@dataclass
class DeletedFolderView:
    id: uuid.UUID
    name: str
    parent_id: uuid.UUID | None
    deleted_at: datetime
    expires_at: datetime
    days_remaining: int
    urgency: Urgency
    note_count: int


def get_deleted_items(
    db: Session,
    user_id: str,
    folder_filter: uuid.UUID | None = None,
    search_query: str | None = None,
    clock: Clock = system_clock,
    policy: RetentionPolicy | None = None,
) -> list[DeletedNoteView]:
    """
    The caller's trashed notes, most recently deleted first.

    folder_filter matches the folder a note was deleted from. search_query
    is a case-insensitive substring match over title and content.
    """
    policy = policy or RetentionPolicy.from_settings()
    now = clock.now()

    query = db.query(Note).filter(Note.user_id == user_id, Note.is_deleted == True)
    if folder_filter is not None:
        query = query.filter(Note.deleted_from_folder_id == folder_filter)
    if search_query:
        # % and _ in the search text match literally
        query = query.filter(
            or_(
                Note.title.icontains(search_query, autoescape=True),
                Note.content.icontains(search_query, autoescape=True),
            )
        )

    notes = query.all()

    origin_ids = {n.deleted_from_folder_id for n in notes if n.deleted_from_folder_id}
    folder_names = {}
    if origin_ids:
        folder_names = dict(db.query(Folder.id, Folder.name).filter(Folder.id.in_(origin_ids)).all())

    views = []
    for note in notes:
        deleted_at = note.lifecycle.at
        views.append(
            DeletedNoteView(
                id=note.id,
                title=note.title,
                content=note.content,
                folder_id=note.folder_id,
                deleted_at=deleted_at,
                deleted_from_folder_id=note.deleted_from_folder_id,
                original_folder_name=folder_names.get(note.deleted_from_folder_id),
                expires_at=policy.expiration_of(deleted_at),
                days_remaining=policy.days_remaining(deleted_at, now),
                urgency=policy.urgency(deleted_at, now),
                expiration_message=policy.format_expiration_message(deleted_at, now),
            )
        )

    views.sort(key=lambda v: v.deleted_at, reverse=True)
    return views


def get_deleted_folders(
    db: Session,
    user_id: str,
    clock: Clock = system_clock,
    policy: RetentionPolicy | None = None,
) -> list[DeletedFolderView]:
    policy = policy or RetentionPolicy.from_settings()
    now = clock.now()

    folders = db.query(Folder).filter(Folder.user_id == user_id, Folder.is_deleted == True).all()

    counts = {}
    if folders:
        counts = dict(
            db.query(Note.folder_id, func.count(Note.id))
            .filter(Note.folder_id.in_([f.id for f in folders]))
            .group_by(Note.folder_id)
            .all()
        )

    views = []
    for folder in folders:
        deleted_at = folder.lifecycle.at
        views.append(
            DeletedFolderView(
                id=folder.id,
                name=folder.name,
                parent_id=folder.parent_id,
                deleted_at=deleted_at,
                expires_at=policy.expiration_of(deleted_at),
                days_remaining=policy.days_remaining(deleted_at, now),
                urgency=policy.urgency(deleted_at, now),
                note_count=counts.get(folder.id, 0),
            )
        )

    views.sort(key=lambda v: v.deleted_at, reverse=True)
    return views


# -----------------------------------------------------------------------------
# Notes
# -----------------------------------------------------------------------------


def soft_delete_note(db: Session, note_id: uuid.UUID, user_id: str, clock: Clock = system_clock) -> Note:
    note = soft_delete_service.soft_delete_note(db, note_id, user_id, clock=clock)
    audit_service.record_entry(
        db,
        user_id=user_id,
        action=AuditAction.SOFT_DELETE,
        item_type=ItemType.NOTE,
        item_id=note.id,
        item_title=note.title,
        metadata={"deletedFromFolderId": note.deleted_from_folder_id},
        clock=clock,
    )
    return note


def restore_note(
    db: Session,
    note_id: uuid.UUID,
    user_id: str,
    target_folder_id: uuid.UUID | None = None,
    clock: Clock = system_clock,
) -> soft_delete_service.RestoreResult:
    restored = soft_delete_service.restore_note(db, note_id, user_id, target_folder_id, clock=clock)
    audit_service.record_entry(
        db,
        user_id=user_id,
        action=AuditAction.RESTORE,
        item_type=ItemType.NOTE,
        item_id=note_id,
        item_title=restored.note.title,
        metadata={
            "restoredToFolderId": restored.restored_to_folder_id,
            "restoredToOriginal": is_restoring_to_original(
                restored.restored_to_folder_id, restored.original_folder_id
            ),
        },
        clock=clock,
    )
    return restored


def permanent_delete_note(db: Session, note_id: uuid.UUID, user_id: str, clock: Clock = system_clock):
    purged = soft_delete_service.purge_note(db, note_id, user_id)
    audit_service.record_entry(
        db,
        user_id=user_id,
        action=AuditAction.PERMANENT_DELETE,
        item_type=ItemType.NOTE,
        item_id=purged.id,
        item_title=purged.title,
        metadata={"deletedAt": purged.deleted_at},
        clock=clock,
    )
    return purged


def bulk_restore_notes(db: Session, note_ids: list[uuid.UUID], user_id: str, clock: Clock = system_clock):
    return bulk_service.bulk_restore_notes(db, note_ids, user_id, clock=clock)


def bulk_permanent_delete_notes(db: Session, note_ids: list[uuid.UUID], user_id: str, clock: Clock = system_clock):
    return bulk_service.bulk_permanent_delete_notes(db, note_ids, user_id, clock=clock)


def empty_trash(db: Session, user_id: str, clock: Clock = system_clock):
    return bulk_service.empty_trash(db, user_id, clock=clock)


# -----------------------------------------------------------------------------
# Folders
# -----------------------------------------------------------------------------


def soft_delete_folder(
    db: Session,
    folder_id: uuid.UUID,
    user_id: str,
    delete_contents: bool = False,
    clock: Clock = system_clock,
) -> soft_delete_service.FolderDeleteResult:
    result = soft_delete_service.soft_delete_folder(db, folder_id, user_id, delete_contents, clock=clock)

    audit_service.record_entry(
        db,
        user_id=user_id,
        action=AuditAction.SOFT_DELETE,
        item_type=ItemType.FOLDER,
        item_id=folder_id,
        item_title=result.folder.name,
        metadata={
            "deleteContents": delete_contents,
            "notesDeleted": len(result.notes_deleted),
            "notesMovedToRoot": result.notes_moved,
        },
        clock=clock,
        commit=False,
    )
    for note in result.notes_deleted:
        audit_service.record_entry(
            db,
            user_id=user_id,
            action=AuditAction.SOFT_DELETE,
            item_type=ItemType.NOTE,
            item_id=note.id,
            item_title=note.title,
            metadata={"deletedFromFolderId": folder_id},
            clock=clock,
            commit=False,
        )
    db.commit()
    return result


def restore_folder(db: Session, folder_id: uuid.UUID, user_id: str, clock: Clock = system_clock) -> Folder:
    folder = soft_delete_service.restore_folder(db, folder_id, user_id)
    audit_service.record_entry(
        db,
        user_id=user_id,
        action=AuditAction.RESTORE,
        item_type=ItemType.FOLDER,
        item_id=folder.id,
        item_title=folder.name,
        clock=clock,
    )
    return folder


def permanent_delete_folder(
    db: Session, folder_id: uuid.UUID, user_id: str, clock: Clock = system_clock
) -> soft_delete_service.FolderPurgeResult:
    result = soft_delete_service.purge_folder(db, folder_id, user_id)

    audit_service.record_entry(
        db,
        user_id=user_id,
        action=AuditAction.PERMANENT_DELETE,
        item_type=ItemType.FOLDER,
        item_id=result.folder.id,
        item_title=result.folder.title,
        metadata={"childNotesCount": len(result.notes_purged)},
        clock=clock,
        commit=False,
    )
    for note in result.notes_purged:
        audit_service.record_entry(
            db,
            user_id=user_id,
            action=AuditAction.PERMANENT_DELETE,
            item_type=ItemType.NOTE,
            item_id=note.id,
            item_title=note.title,
            metadata={"cascadeFromFolderId": result.folder.id},
            clock=clock,
            commit=False,
        )
    db.commit()
    return result


# -----------------------------------------------------------------------------
# Audit
# -----------------------------------------------------------------------------


def get_user_audit_log(
    db: Session,
    caller_id: str,
    user_id: str | None = None,
    caller_email: str | None = None,
    limit: int | None = None,
) -> list[TrashAuditLog]:
    """
    Audit entries for a user, newest first. Defaults to the caller's own log;
    reading anyone else's needs an active admin role.
    """
    target = user_id or caller_id
    if target != caller_id and not is_admin(db, caller_email):
        logger.warning(
            f"User {caller_id} denied access to audit log of {target}",
            extra={"event": "audit_access_denied", "user_id": caller_id},
        )
        raise Unauthorized()

    return audit_service.query_for_user(db, target, limit=limit).all()

# noteflow/services/trash/bulk_service.py
"""
Batch trash operations with per-item accounting.

A batch never aborts because one item failed: each id gets its own result.
An item's state change and its audit entry commit together, so a store error
on one item rolls both back and is reported as reason "error" while the rest
of the batch carries on. Only structural problems with the request itself
(empty list, too many ids) raise.
"""

import logging
import uuid
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from noteflow.clock import Clock, system_clock
from noteflow.config import get_settings
from noteflow.logging_config import BatchProgress
from noteflow.models import AuditAction, Folder, ItemType, Note
from noteflow.services.trash import audit_service
from noteflow.services.trash.errors import NotDeleted, NotFound, ValidationError
from noteflow.services.trash.restore_resolver import is_restoring_to_original
from noteflow.services.trash.soft_delete_service import (
    hard_delete_folder,
    hard_delete_note,
    purge_note,
    restore_note,
)

logger = logging.getLogger(__name__)

REASON_NOT_FOUND_OR_NOT_DELETED = "not_found_or_not_deleted"
REASON_NOT_FOUND = "not_found"
REASON_ERROR = "error"


@dataclass
class ItemResult:
    """Outcome for one id in a batch."""

    note_id: uuid.UUID
    success: bool
    restored_to_folder_id: uuid.UUID | None = None
    reason: str | None = None


@dataclass
class EmptyTrashResult:
    notes_deleted: int = 0
    folders_deleted: int = 0
    errors: list[str] = field(default_factory=list)


def validate_batch(note_ids: list) -> None:
    """
    Raises:
        ValidationError: empty batch or more ids than MAX_BULK_OPERATION_SIZE
    """
    if not note_ids:
        raise ValidationError("At least one note id is required")
    max_size = get_settings().MAX_BULK_OPERATION_SIZE
    if len(note_ids) > max_size:
        raise ValidationError(f"Bulk operations are limited to {max_size} items")


# -----------------------------------------------------------------------------
# Bulk restore / delete
# -----------------------------------------------------------------------------


def bulk_restore_notes(
    db: Session,
    note_ids: list[uuid.UUID],
    user_id: str,
    clock: Clock = system_clock,
) -> list[ItemResult]:
    """Restore each note to its original folder when possible, else root."""
    validate_batch(note_ids)

    results = []
    progress = BatchProgress(label="bulk_restore", total=len(note_ids))

    for note_id in note_ids:
        try:
            restored = restore_note(db, note_id, user_id, clock=clock, commit=False)
            audit_service.record_entry(
                db,
                user_id=user_id,
                action=AuditAction.BULK_RESTORE,
                item_type=ItemType.NOTE,
                item_id=note_id,
                item_title=restored.note.title,
                metadata={
                    "restoredToFolderId": restored.restored_to_folder_id,
                    "restoredToOriginal": is_restoring_to_original(
                        restored.restored_to_folder_id, restored.original_folder_id
                    ),
                    "bulkOperationSize": len(note_ids),
                },
                clock=clock,
                commit=False,
            )
            db.commit()
            results.append(
                ItemResult(note_id=note_id, success=True, restored_to_folder_id=restored.restored_to_folder_id)
            )
            progress.record(ok=True)
        except (NotFound, NotDeleted):
            results.append(ItemResult(note_id=note_id, success=False, reason=REASON_NOT_FOUND_OR_NOT_DELETED))
            progress.record(ok=False)
        except Exception as e:
            db.rollback()
            logger.error(f"Bulk restore failed for note {note_id}: {e}", extra={"item_id": str(note_id)})
            results.append(ItemResult(note_id=note_id, success=False, reason=REASON_ERROR))
            progress.record(ok=False)

    progress.done()
    return results


def bulk_permanent_delete_notes(
    db: Session,
    note_ids: list[uuid.UUID],
    user_id: str,
    clock: Clock = system_clock,
) -> list[ItemResult]:
    """Permanently delete each note and its tag associations."""
    validate_batch(note_ids)

    results = []
    progress = BatchProgress(label="bulk_delete", total=len(note_ids))

    for note_id in note_ids:
        try:
            purged = purge_note(db, note_id, user_id, commit=False)
            audit_service.record_entry(
                db,
                user_id=user_id,
                action=AuditAction.BULK_DELETE,
                item_type=ItemType.NOTE,
                item_id=note_id,
                item_title=purged.title,
                metadata={"bulkOperationSize": len(note_ids)},
                clock=clock,
                commit=False,
            )
            db.commit()
            results.append(ItemResult(note_id=note_id, success=True))
            progress.record(ok=True)
        except NotFound:
            results.append(ItemResult(note_id=note_id, success=False, reason=REASON_NOT_FOUND))
            progress.record(ok=False)
        except Exception as e:
            db.rollback()
            logger.error(f"Bulk delete failed for note {note_id}: {e}", extra={"item_id": str(note_id)})
            results.append(ItemResult(note_id=note_id, success=False, reason=REASON_ERROR))
            progress.record(ok=False)

    progress.done()
    return results


# -----------------------------------------------------------------------------
# Empty trash
# -----------------------------------------------------------------------------


def empty_trash(db: Session, user_id: str, clock: Clock = system_clock) -> EmptyTrashResult:
    """
    Permanently delete everything in a user's trash.

    Items are purged one at a time and committed individually, so an
    interruption leaves a smaller trash rather than a half-applied batch.
    Live notes still filed under a purged folder are moved to root.
    One summary audit entry is written for the whole call.
    """
    result = EmptyTrashResult()

    note_ids = [
        row.id for row in db.query(Note.id).filter(Note.user_id == user_id, Note.is_deleted == True).all()
    ]
    for note_id in note_ids:
        try:
            if hard_delete_note(db, note_id):
                result.notes_deleted += 1
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Empty trash failed for note {note_id}: {e}", extra={"user_id": user_id})
            result.errors.append(f"Note {note_id}: {str(e)}")

    folder_ids = [
        row.id for row in db.query(Folder.id).filter(Folder.user_id == user_id, Folder.is_deleted == True).all()
    ]
    for folder_id in folder_ids:
        try:
            (
                db.query(Note)
                .filter(Note.folder_id == folder_id, Note.is_deleted == False)
                .update({"folder_id": None}, synchronize_session=False)
            )
            if hard_delete_folder(db, folder_id):
                result.folders_deleted += 1
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Empty trash failed for folder {folder_id}: {e}", extra={"user_id": user_id})
            result.errors.append(f"Folder {folder_id}: {str(e)}")

    audit_service.record_entry(
        db,
        user_id=user_id,
        action=AuditAction.EMPTY_TRASH,
        item_type=ItemType.NOTE,
        item_id=user_id,
        item_title="Empty Trash",
        metadata={"notesDeleted": result.notes_deleted, "foldersDeleted": result.folders_deleted},
        clock=clock,
    )

    logger.info(
        f"Emptied trash for user {user_id}: {result.notes_deleted} notes, {result.folders_deleted} folders",
        extra={
            "user_id": user_id,
            "notes_deleted": result.notes_deleted,
            "folders_deleted": result.folders_deleted,
        },
    )
    return result

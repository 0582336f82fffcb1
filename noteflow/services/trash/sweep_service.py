# noteflow/services/trash/sweep_service.py
"""
Retention sweeper: permanently removes trash that has outlived the retention
window.

Run once per day by an external scheduler (00:00 UTC). The scheduler owns
single-flight; the sweeper itself only guarantees that running twice is
harmless. Purging an id that is already gone is a no-op, and anything a run
fails to purge is simply found again by the next run.

Order per run:
1. Expired notes: delete tag links, record auto_delete, delete the note
2. Expired folders: purge notes still filed under the folder, record one
   auto_delete for the folder with childNotesCount, delete the folder

Notes go first so a folder is never removed while notes still point at it.
Each item is its own transaction.
"""

import logging
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from sqlalchemy import or_
from sqlalchemy.orm import Session

from noteflow.clock import Clock, system_clock
from noteflow.logging_config import BatchProgress, bound_run, sweep_phase
from noteflow.models import AuditAction, Folder, ItemType, Note
from noteflow.services.trash import audit_service
from noteflow.services.trash.policy_service import RetentionPolicy
from noteflow.services.trash.soft_delete_service import hard_delete_folder, hard_delete_note

logger = logging.getLogger(__name__)


class SweepState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    PURGING = "purging"


@dataclass
class SweepResult:
    """Result of a sweep run (or a preview of one)."""

    timestamp: datetime
    success: bool = True
    dry_run: bool = False
    notes_deleted: int = 0
    folders_deleted: int = 0
    cascaded_notes_deleted: int = 0
    errors: list[str] = field(default_factory=list)

    def summary(self) -> dict:
        return {
            "notes_deleted": self.notes_deleted,
            "folders_deleted": self.folders_deleted,
            "timestamp": self.timestamp,
        }


class RetentionSweeper:
    """
    Usage:
        sweeper = RetentionSweeper(db, clock=clock)
        result = sweeper.run()
    """

    def __init__(self, db: Session, clock: Clock = system_clock, policy: RetentionPolicy | None = None):
        self.db = db
        self.clock = clock
        self.policy = policy or RetentionPolicy.from_settings()
        self.state = SweepState.IDLE

    # -------------------------------------------------------------------------
    # Scans
    # -------------------------------------------------------------------------

    def _expired_notes(self, threshold: datetime) -> list:
        # Rows flagged deleted without a timestamp count as long expired
        return (
            self.db.query(Note.id, Note.user_id, Note.title, Note.folder_id, Note.deleted_at)
            .filter(
                Note.is_deleted == True,
                or_(Note.deleted_at < threshold, Note.deleted_at.is_(None)),
            )
            .all()
        )

    def _expired_folders(self, threshold: datetime) -> list:
        return (
            self.db.query(Folder.id, Folder.user_id, Folder.name, Folder.deleted_at)
            .filter(
                Folder.is_deleted == True,
                or_(Folder.deleted_at < threshold, Folder.deleted_at.is_(None)),
            )
            .all()
        )

    def _remaining_children(self, folder_id: uuid.UUID) -> list:
        return (
            self.db.query(Note.id, Note.user_id, Note.title, Note.deleted_at)
            .filter(Note.folder_id == folder_id)
            .all()
        )

    # -------------------------------------------------------------------------
    # Purge steps
    # -------------------------------------------------------------------------

    def _purge_expired_note(self, note, threshold: datetime, cascade_from: uuid.UUID | None = None) -> bool:
        """Delete one note with its tags and audit it, in one transaction."""
        if not hard_delete_note(self.db, note.id):
            self.db.rollback()
            return False

        metadata = {"deletedAt": note.deleted_at, "expirationDate": threshold}
        if cascade_from is not None:
            metadata["cascadeFromFolderId"] = cascade_from

        audit_service.record_entry(
            self.db,
            user_id=note.user_id,
            action=AuditAction.AUTO_DELETE,
            item_type=ItemType.NOTE,
            item_id=note.id,
            item_title=note.title,
            metadata=metadata,
            clock=self.clock,
            commit=False,
        )
        self.db.commit()
        return True

    def _purge_expired_folder(self, folder, threshold: datetime, already_purged: int, result: SweepResult) -> bool:
        children_purged = already_purged
        for child in self._remaining_children(folder.id):
            if self._purge_expired_note(child, threshold, cascade_from=folder.id):
                children_purged += 1
                result.cascaded_notes_deleted += 1

        if not hard_delete_folder(self.db, folder.id):
            self.db.rollback()
            return False

        audit_service.record_entry(
            self.db,
            user_id=folder.user_id,
            action=AuditAction.AUTO_DELETE,
            item_type=ItemType.FOLDER,
            item_id=folder.id,
            item_title=folder.name,
            metadata={
                "deletedAt": folder.deleted_at,
                "expirationDate": threshold,
                "childNotesCount": children_purged,
            },
            clock=self.clock,
            commit=False,
        )
        self.db.commit()
        return True

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def run(self) -> SweepResult:
        now = self.clock.now()
        threshold = self.policy.expiration_threshold(now)
        run_id = uuid.uuid4().hex[:12]
        result = SweepResult(timestamp=now)

        # Notes purged in the note phase, keyed by the folder they were filed under
        purged_by_folder: Counter = Counter()

        with bound_run(run_id):
            try:
                self.state = SweepState.SCANNING
                with sweep_phase("scan_expired_notes"):
                    expired_notes = self._expired_notes(threshold)

                self.state = SweepState.PURGING
                with sweep_phase("purge_expired_notes"):
                    progress = BatchProgress(label="purge_expired_notes", total=len(expired_notes))
                    for note in expired_notes:
                        try:
                            purged = self._purge_expired_note(note, threshold)
                            if purged:
                                result.notes_deleted += 1
                                if note.folder_id is not None:
                                    purged_by_folder[note.folder_id] += 1
                            progress.record(ok=True)
                        except Exception as e:
                            self.db.rollback()
                            logger.error(
                                f"Failed to purge expired note {note.id}: {e}", extra={"item_id": str(note.id)}
                            )
                            result.errors.append(f"Note {note.id}: {str(e)}")
                            result.success = False
                            progress.record(ok=False)
                    progress.done()

                self.state = SweepState.SCANNING
                with sweep_phase("scan_expired_folders"):
                    expired_folders = self._expired_folders(threshold)

                self.state = SweepState.PURGING
                with sweep_phase("purge_expired_folders"):
                    progress = BatchProgress(label="purge_expired_folders", total=len(expired_folders))
                    for folder in expired_folders:
                        try:
                            if self._purge_expired_folder(folder, threshold, purged_by_folder[folder.id], result):
                                result.folders_deleted += 1
                            progress.record(ok=True)
                        except Exception as e:
                            self.db.rollback()
                            logger.error(
                                f"Failed to purge expired folder {folder.id}: {e}", extra={"item_id": str(folder.id)}
                            )
                            result.errors.append(f"Folder {folder.id}: {str(e)}")
                            result.success = False
                            progress.record(ok=False)
                    progress.done()
            finally:
                self.state = SweepState.IDLE

            logger.info(
                f"Retention sweep complete: {result.notes_deleted} notes, {result.folders_deleted} folders, "
                f"{result.cascaded_notes_deleted} cascaded, {len(result.errors)} errors",
                extra={
                    "event": "sweep_complete",
                    "notes_deleted": result.notes_deleted,
                    "folders_deleted": result.folders_deleted,
                    "items_failed": len(result.errors),
                },
            )
        return result

    def preview(self) -> SweepResult:
        """Count what run() would purge right now, without writing anything."""
        now = self.clock.now()
        threshold = self.policy.expiration_threshold(now)
        result = SweepResult(timestamp=now, dry_run=True)

        expired_note_ids = {note.id for note in self._expired_notes(threshold)}
        result.notes_deleted = len(expired_note_ids)

        for folder in self._expired_folders(threshold):
            result.folders_deleted += 1
            result.cascaded_notes_deleted += sum(
                1 for child in self._remaining_children(folder.id) if child.id not in expired_note_ids
            )

        logger.info(
            f"Sweep preview: {result.notes_deleted} notes, {result.folders_deleted} folders, "
            f"{result.cascaded_notes_deleted} cascaded",
        )
        return result


def run_retention_sweep(db: Session, clock: Clock = system_clock) -> SweepResult:
    """Scheduled entry point."""
    return RetentionSweeper(db, clock=clock).run()


def preview_retention_sweep(db: Session, clock: Clock = system_clock) -> SweepResult:
    return RetentionSweeper(db, clock=clock).preview()

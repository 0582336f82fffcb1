# noteflow/schemas/trash.py
"""
Schemas for trash and retention endpoints.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from noteflow.services.trash.policy_service import Urgency

# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    detail: str
    error_code: str


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------


class RestoreNoteRequest(BaseModel):
    """Optional explicit destination for a restore."""

    target_folder_id: uuid.UUID | None = Field(None, description="Folder to restore into (default: original folder)")


class BulkNoteIdsRequest(BaseModel):
    note_ids: list[uuid.UUID] = Field(..., description="Notes to act on")


# -----------------------------------------------------------------------------
# Items
# -----------------------------------------------------------------------------


class NoteResponse(BaseModel):
    """A note as returned after a lifecycle change."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    folder_id: uuid.UUID | None = None
    is_deleted: bool
    deleted_at: datetime | None = None
    deleted_from_folder_id: uuid.UUID | None = None


class FolderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    parent_id: uuid.UUID | None = None
    is_deleted: bool
    deleted_at: datetime | None = None


class DeletedNoteResponse(BaseModel):
    """A trashed note with its expiration details."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    content: str
    deleted_at: datetime
    deleted_from_folder_id: uuid.UUID | None = None
    original_folder_name: str | None = Field(None, description="Name of the folder it was deleted from, if it still exists")
    expires_at: datetime
    days_remaining: int = Field(..., description="Whole days left; zero or negative when awaiting the next sweep")
    urgency: Urgency = Field(..., description="normal|warning|urgent")
    expiration_message: str


class DeletedFolderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    parent_id: uuid.UUID | None = None
    deleted_at: datetime
    expires_at: datetime
    days_remaining: int
    urgency: Urgency
    note_count: int


class TrashListResponse(BaseModel):
    notes: list[DeletedNoteResponse]
    total: int


# -----------------------------------------------------------------------------
# Operation results
# -----------------------------------------------------------------------------


class RestoreNoteResponse(BaseModel):
    note: NoteResponse
    restored_to_folder_id: uuid.UUID | None = None
    restored_to_original: bool


class PermanentDeleteResponse(BaseModel):
    id: uuid.UUID
    deleted: bool = True
    child_notes_deleted: int = 0


class FolderDeleteResponse(BaseModel):
    folder: FolderResponse
    notes_deleted: int
    notes_moved_to_root: int


class BulkItemResult(BaseModel):
    """Outcome for one id in a bulk request."""

    model_config = ConfigDict(from_attributes=True)

    note_id: uuid.UUID
    success: bool
    restored_to_folder_id: uuid.UUID | None = None
    reason: str | None = Field(None, description="not_found|not_found_or_not_deleted|error")


class BulkOperationResponse(BaseModel):
    results: list[BulkItemResult]
    succeeded: int
    failed: int


class EmptyTrashResponse(BaseModel):
    notes_deleted: int
    folders_deleted: int
    errors: list[str] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Audit
# -----------------------------------------------------------------------------


class AuditEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: str
    action: str
    item_type: str
    item_id: str
    item_title: str
    timestamp: datetime
    metadata: dict[str, Any] | None = Field(None, validation_alias="event_metadata")


class AuditLogResponse(BaseModel):
    entries: list[AuditEntryResponse]
    total: int


class AuditStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    period_start: datetime
    period_end: datetime
    total_auto_deletes: int
    total_restores: int
    total_permanent_deletes: int
    total_bulk_operations: int
    by_action: dict[str, int]


# -----------------------------------------------------------------------------
# Admin
# -----------------------------------------------------------------------------


class SweepResponse(BaseModel):
    """Sweep run (or preview) result."""

    model_config = ConfigDict(from_attributes=True)

    success: bool
    dry_run: bool
    timestamp: datetime
    notes_deleted: int
    folders_deleted: int
    cascaded_notes_deleted: int
    errors: list[str]


class AuditPurgeRequest(BaseModel):
    older_than_days: int | None = Field(None, ge=1, le=3650, description="Default: AUDIT_LOG_RETENTION_DAYS")
    dry_run: bool = Field(False, description="Preview only, don't delete")
    confirm: bool = Field(False, description="Required confirmation for non-dry-run")


class AuditPurgeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cutoff: datetime
    dry_run: bool
    entries_deleted: int

# noteflow/routers/trash.py
"""
Trash endpoints for the signed-in user.

GET    /v1/trash                             - Trashed notes with expiration info
GET    /v1/trash/folders                     - Trashed folders
DELETE /v1/trash/notes/{id}                  - Move a note to the trash
POST   /v1/trash/notes/{id}/restore          - Restore a note
DELETE /v1/trash/notes/{id}/permanent        - Permanently delete a note
POST   /v1/trash/notes/bulk-restore          - Restore many notes
POST   /v1/trash/notes/bulk-delete           - Permanently delete many notes
DELETE /v1/trash/folders/{id}                - Move a folder to the trash
POST   /v1/trash/folders/{id}/restore        - Restore a folder
DELETE /v1/trash/folders/{id}/permanent      - Permanently delete a folder
POST   /v1/trash/empty                       - Empty the trash
GET    /v1/trash/audit                       - Audit log (own, or any user's for admins)
GET    /v1/trash/audit/stats                 - Activity counts for the caller
"""

import logging
import uuid

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from noteflow.auth import CurrentUser, get_current_user
from noteflow.clock import Clock, get_clock
from noteflow.database import get_db
from noteflow.schemas.trash import (
    AuditEntryResponse,
    AuditLogResponse,
    AuditStatsResponse,
    BulkItemResult,
    BulkNoteIdsRequest,
    BulkOperationResponse,
    DeletedFolderResponse,
    DeletedNoteResponse,
    EmptyTrashResponse,
    ErrorResponse,
    FolderDeleteResponse,
    FolderResponse,
    NoteResponse,
    PermanentDeleteResponse,
    RestoreNoteRequest,
    RestoreNoteResponse,
    TrashListResponse,
)
from noteflow.services.trash import audit_service, trash_service
from noteflow.services.trash.restore_resolver import is_restoring_to_original

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/v1/trash",
    tags=["trash"],
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)


def _bulk_response(results) -> BulkOperationResponse:
    items = [BulkItemResult.model_validate(r) for r in results]
    succeeded = sum(1 for r in items if r.success)
    return BulkOperationResponse(results=items, succeeded=succeeded, failed=len(items) - succeeded)


# -----------------------------------------------------------------------------
# Listing
# -----------------------------------------------------------------------------


@router.get("", response_model=TrashListResponse)
def list_trash(
    folder_id: uuid.UUID | None = Query(None, description="Only notes deleted from this folder"),
    q: str | None = Query(None, max_length=200, description="Search title and content"),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> TrashListResponse:
    items = trash_service.get_deleted_items(db, user.user_id, folder_filter=folder_id, search_query=q, clock=clock)
    return TrashListResponse(
        notes=[DeletedNoteResponse.model_validate(item) for item in items],
        total=len(items),
    )


@router.get("/folders", response_model=list[DeletedFolderResponse])
def list_trashed_folders(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> list[DeletedFolderResponse]:
    folders = trash_service.get_deleted_folders(db, user.user_id, clock=clock)
    return [DeletedFolderResponse.model_validate(f) for f in folders]


# -----------------------------------------------------------------------------
# Notes
# -----------------------------------------------------------------------------


@router.delete("/notes/{note_id}", response_model=NoteResponse)
def trash_note(
    note_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> NoteResponse:
    note = trash_service.soft_delete_note(db, note_id, user.user_id, clock=clock)
    return NoteResponse.model_validate(note)


@router.post("/notes/bulk-restore", response_model=BulkOperationResponse)
def bulk_restore(
    request: BulkNoteIdsRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> BulkOperationResponse:
    results = trash_service.bulk_restore_notes(db, request.note_ids, user.user_id, clock=clock)
    return _bulk_response(results)


@router.post("/notes/bulk-delete", response_model=BulkOperationResponse)
def bulk_delete(
    request: BulkNoteIdsRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> BulkOperationResponse:
    """**WARNING**: permanently deletes the listed notes."""
    results = trash_service.bulk_permanent_delete_notes(db, request.note_ids, user.user_id, clock=clock)
    return _bulk_response(results)


@router.post("/notes/{note_id}/restore", response_model=RestoreNoteResponse)
def restore_note(
    note_id: uuid.UUID,
    request: RestoreNoteRequest | None = Body(None),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> RestoreNoteResponse:
    """
    Restore a note from the trash.

    Without a target it goes back to the folder it was deleted from, or to
    root if that folder is gone or itself in the trash.
    """
    target = request.target_folder_id if request else None
    restored = trash_service.restore_note(db, note_id, user.user_id, target_folder_id=target, clock=clock)
    return RestoreNoteResponse(
        note=NoteResponse.model_validate(restored.note),
        restored_to_folder_id=restored.restored_to_folder_id,
        restored_to_original=is_restoring_to_original(restored.restored_to_folder_id, restored.original_folder_id),
    )


@router.delete("/notes/{note_id}/permanent", response_model=PermanentDeleteResponse)
def permanently_delete_note(
    note_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> PermanentDeleteResponse:
    purged = trash_service.permanent_delete_note(db, note_id, user.user_id, clock=clock)
    return PermanentDeleteResponse(id=purged.id)


# -----------------------------------------------------------------------------
# Folders
# -----------------------------------------------------------------------------


@router.delete("/folders/{folder_id}", response_model=FolderDeleteResponse)
def trash_folder(
    folder_id: uuid.UUID,
    delete_contents: bool = Query(False, description="Trash the folder's notes too (default: move them to root)"),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> FolderDeleteResponse:
    result = trash_service.soft_delete_folder(db, folder_id, user.user_id, delete_contents, clock=clock)
    return FolderDeleteResponse(
        folder=FolderResponse.model_validate(result.folder),
        notes_deleted=len(result.notes_deleted),
        notes_moved_to_root=result.notes_moved,
    )


@router.post("/folders/{folder_id}/restore", response_model=FolderResponse)
def restore_folder(
    folder_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> FolderResponse:
    folder = trash_service.restore_folder(db, folder_id, user.user_id, clock=clock)
    return FolderResponse.model_validate(folder)


@router.delete("/folders/{folder_id}/permanent", response_model=PermanentDeleteResponse)
def permanently_delete_folder(
    folder_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> PermanentDeleteResponse:
    result = trash_service.permanent_delete_folder(db, folder_id, user.user_id, clock=clock)
    return PermanentDeleteResponse(id=result.folder.id, child_notes_deleted=len(result.notes_purged))


@router.post("/empty", response_model=EmptyTrashResponse)
def empty_trash(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> EmptyTrashResponse:
    """**WARNING**: permanently deletes everything in the caller's trash."""
    result = trash_service.empty_trash(db, user.user_id, clock=clock)
    return EmptyTrashResponse(
        notes_deleted=result.notes_deleted,
        folders_deleted=result.folders_deleted,
        errors=result.errors,
    )


# -----------------------------------------------------------------------------
# Audit
# -----------------------------------------------------------------------------


@router.get("/audit", response_model=AuditLogResponse)
def get_audit_log(
    user_id: str | None = Query(None, description="Another user's log (admins only)"),
    limit: int | None = Query(None, ge=1, le=1000),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AuditLogResponse:
    entries = trash_service.get_user_audit_log(
        db,
        caller_id=user.user_id,
        user_id=user_id,
        caller_email=user.email,
        limit=limit,
    )
    return AuditLogResponse(
        entries=[AuditEntryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )


@router.get("/audit/stats", response_model=AuditStatsResponse)
def get_audit_stats(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> AuditStatsResponse:
    stats = audit_service.get_audit_stats(db, user_id=user.user_id, clock=clock)
    return AuditStatsResponse.model_validate(stats)

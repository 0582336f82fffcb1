# noteflow/routers/admin_trash.py
"""
Admin endpoints for trash retention.

GET  /v1/admin/trash/status        - Trash and audit counts
POST /v1/admin/trash/sweep         - Run the retention sweep now
POST /v1/admin/trash/sweep/preview - Preview what the sweep would purge
GET  /v1/admin/trash/audit         - Every user's audit entries (admin role required)
GET  /v1/admin/trash/audit/stats   - Activity counts across all users
POST /v1/admin/trash/audit/purge   - Remove audit entries past the audit retention window

All endpoints require X-API-Key. The cross-user audit view additionally
requires the caller's email (X-User-Email) to hold an active admin role.
"""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from noteflow.auth import require_admin_key
from noteflow.clock import Clock, get_clock
from noteflow.database import get_db
from noteflow.models import Folder, Note, TrashAuditLog
from noteflow.schemas.trash import (
    AuditEntryResponse,
    AuditLogResponse,
    AuditPurgeRequest,
    AuditPurgeResponse,
    AuditStatsResponse,
    SweepResponse,
)
from noteflow.services.trash import audit_service
from noteflow.services.trash.policy_service import RetentionPolicy
from noteflow.services.trash.sweep_service import preview_retention_sweep, run_retention_sweep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/trash", tags=["admin-trash"])


# -----------------------------------------------------------------------------
# Response Models
# -----------------------------------------------------------------------------


class TrashStatusResponse(BaseModel):
    """Trash statistics."""

    notes_in_trash: int
    folders_in_trash: int
    audit_entries: int
    policy: dict[str, int]


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("/status", response_model=TrashStatusResponse)
def get_trash_status(
    db: Session = Depends(get_db),
    _: None = Depends(require_admin_key),
) -> TrashStatusResponse:
    policy = RetentionPolicy.from_settings()
    return TrashStatusResponse(
        notes_in_trash=db.query(func.count(Note.id)).filter(Note.is_deleted == True).scalar() or 0,
        folders_in_trash=db.query(func.count(Folder.id)).filter(Folder.is_deleted == True).scalar() or 0,
        audit_entries=db.query(func.count(TrashAuditLog.id)).scalar() or 0,
        policy={
            "retention_days": policy.retention_days,
            "warning_days": policy.warning_days,
            "urgent_days": policy.urgent_days,
        },
    )


@router.post("/sweep", response_model=SweepResponse)
def trigger_sweep(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _: None = Depends(require_admin_key),
) -> SweepResponse:
    """
    Run the retention sweep immediately.

    **WARNING**: This permanently deletes expired trash. Normally triggered
    by the daily scheduler; safe to run again at any time.
    """
    result = run_retention_sweep(db, clock=clock)
    return SweepResponse.model_validate(result)


@router.post("/sweep/preview", response_model=SweepResponse)
def preview_sweep(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _: None = Depends(require_admin_key),
) -> SweepResponse:
    result = preview_retention_sweep(db, clock=clock)
    return SweepResponse.model_validate(result)


@router.get("/audit", response_model=AuditLogResponse)
def get_all_audit_entries(
    limit: int | None = Query(None, ge=1, le=10000),
    x_user_email: str | None = Header(default=None, alias="X-User-Email"),
    db: Session = Depends(get_db),
    _: None = Depends(require_admin_key),
) -> AuditLogResponse:
    """Audit entries for all users, newest first. Requires an active admin role."""
    entries = audit_service.query_all(db, x_user_email, limit=limit).all()
    return AuditLogResponse(
        entries=[AuditEntryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )


@router.get("/audit/stats", response_model=AuditStatsResponse)
def get_global_audit_stats(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _: None = Depends(require_admin_key),
) -> AuditStatsResponse:
    stats = audit_service.get_audit_stats(db, clock=clock)
    return AuditStatsResponse.model_validate(stats)


@router.post("/audit/purge", response_model=AuditPurgeResponse)
def purge_audit_entries(
    request: AuditPurgeRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    _: None = Depends(require_admin_key),
) -> AuditPurgeResponse:
    """
    Delete audit entries older than the audit retention window.

    Requires `confirm: true` for non-dry-run operations.
    """
    if not request.dry_run and not request.confirm:
        raise HTTPException(
            status_code=400,
            detail="Audit purge requires 'confirm: true' for non-dry-run operations",
        )

    result = audit_service.purge_expired_audit_entries(
        db,
        older_than_days=request.older_than_days,
        clock=clock,
        dry_run=request.dry_run,
    )
    return AuditPurgeResponse.model_validate(result)

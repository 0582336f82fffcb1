# noteflow/services/trash/audit_service.py
"""
Append-only audit trail for trash lifecycle transitions.

Entries are never updated and never removed together with the item they
describe. The only deletion path is purge_expired_audit_entries, which drops
rows older than the audit retention window.

Queries return SQLAlchemy Query objects: nothing is fetched until iterated,
and iterating again re-runs the query.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from noteflow.clock import Clock, system_clock
from noteflow.config import get_settings
from noteflow.models import AuditAction, ItemType, TrashAuditLog
from noteflow.services.trash.admin_role_service import is_admin
from noteflow.services.trash.errors import Unauthorized

logger = logging.getLogger(__name__)

BULK_ACTIONS = (AuditAction.BULK_RESTORE.value, AuditAction.BULK_DELETE.value, AuditAction.EMPTY_TRASH.value)


def _serialize(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


# -----------------------------------------------------------------------------
# Write
# -----------------------------------------------------------------------------


def record_entry(
    db: Session,
    user_id: str,
    action: AuditAction | str,
    item_type: ItemType | str,
    item_id,
    item_title: str = "",
    metadata: dict | None = None,
    clock: Clock = system_clock,
    commit: bool = True,
) -> TrashAuditLog:
    """
    Append one audit entry.

    Unknown action strings are stored as given. Datetimes and UUIDs inside
    metadata are stored as ISO-8601 strings and plain strings respectively.
    """
    entry = TrashAuditLog(
        user_id=user_id,
        action=action.value if isinstance(action, AuditAction) else str(action),
        item_type=item_type.value if isinstance(item_type, ItemType) else str(item_type),
        item_id=str(item_id),
        item_title=item_title or "",
        timestamp=clock.now(),
        event_metadata=_serialize(metadata) if metadata else None,
    )
    db.add(entry)
    if commit:
        db.commit()
    else:
        db.flush()

    logger.debug(
        f"Audit {entry.action} {entry.item_type} {entry.item_id} for user {user_id}",
        extra={"event": "audit_recorded", "user_id": user_id, "item_id": entry.item_id, "action": entry.action},
    )
    return entry


# -----------------------------------------------------------------------------
# Read
# -----------------------------------------------------------------------------


def query_for_user(
    db: Session,
    user_id: str,
    limit: int | None = None,
    action: str | None = None,
    item_type: str | None = None,
) -> Query:
    """A user's audit entries, newest first, at most `limit` rows."""
    if limit is None:
        limit = get_settings().AUDIT_LOG_DEFAULT_LIMIT

    query = db.query(TrashAuditLog).filter(TrashAuditLog.user_id == user_id)
    if action:
        query = query.filter(TrashAuditLog.action == action)
    if item_type:
        query = query.filter(TrashAuditLog.item_type == item_type)
    return query.order_by(TrashAuditLog.timestamp.desc(), TrashAuditLog.id).limit(limit)


def query_all(db: Session, caller_email: str | None, limit: int | None = None) -> Query:
    """
    Every user's audit entries, newest first.

    Raises:
        Unauthorized: caller has no active admin role
    """
    if not is_admin(db, caller_email):
        logger.warning(f"Denied audit log access for {caller_email!r}", extra={"event": "audit_access_denied"})
        raise Unauthorized()

    if limit is None:
        limit = get_settings().ADMIN_AUDIT_LOG_LIMIT

    return db.query(TrashAuditLog).order_by(TrashAuditLog.timestamp.desc(), TrashAuditLog.id).limit(limit)


# -----------------------------------------------------------------------------
# Stats
# -----------------------------------------------------------------------------


@dataclass
class AuditStats:
    """Counts of trash activity within a period."""

    period_start: datetime
    period_end: datetime
    total_auto_deletes: int = 0
    total_restores: int = 0
    total_permanent_deletes: int = 0
    total_bulk_operations: int = 0
    by_action: dict = field(default_factory=dict)


def get_audit_stats(
    db: Session,
    user_id: str | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
    clock: Clock = system_clock,
) -> AuditStats:
    """
    Summarise audit activity, for one user or for everyone.

    Defaults to the last 30 days ending now.
    """
    until = until or clock.now()
    since = since or until - timedelta(days=30)

    query = db.query(TrashAuditLog.action, func.count(TrashAuditLog.id)).filter(
        TrashAuditLog.timestamp >= since,
        TrashAuditLog.timestamp <= until,
    )
    if user_id:
        query = query.filter(TrashAuditLog.user_id == user_id)

    by_action = dict(query.group_by(TrashAuditLog.action).all())

    return AuditStats(
        period_start=since,
        period_end=until,
        total_auto_deletes=by_action.get(AuditAction.AUTO_DELETE.value, 0),
        total_restores=by_action.get(AuditAction.RESTORE.value, 0) + by_action.get(AuditAction.BULK_RESTORE.value, 0),
        total_permanent_deletes=(
            by_action.get(AuditAction.PERMANENT_DELETE.value, 0) + by_action.get(AuditAction.BULK_DELETE.value, 0)
        ),
        total_bulk_operations=sum(by_action.get(a, 0) for a in BULK_ACTIONS),
        by_action=by_action,
    )


# -----------------------------------------------------------------------------
# Audit retention
# -----------------------------------------------------------------------------


@dataclass
class AuditPurgeResult:
    """Result of an audit retention purge."""

    cutoff: datetime
    dry_run: bool = False
    entries_deleted: int = 0


def purge_expired_audit_entries(
    db: Session,
    older_than_days: int | None = None,
    clock: Clock = system_clock,
    dry_run: bool = False,
) -> AuditPurgeResult:
    """Delete audit entries older than the audit retention window."""
    if older_than_days is None:
        older_than_days = get_settings().AUDIT_LOG_RETENTION_DAYS

    cutoff = clock.now() - timedelta(days=older_than_days)
    result = AuditPurgeResult(cutoff=cutoff, dry_run=dry_run)

    query = db.query(TrashAuditLog).filter(TrashAuditLog.timestamp < cutoff)
    if dry_run:
        result.entries_deleted = query.count()
    else:
        result.entries_deleted = query.delete(synchronize_session=False)
        db.commit()

    logger.info(
        f"Audit purge: {result.entries_deleted} entries older than {cutoff.isoformat()} (dry_run={dry_run})",
        extra={"event": "audit_purge", "items_processed": result.entries_deleted},
    )
    return result

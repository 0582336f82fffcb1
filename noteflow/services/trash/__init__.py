# noteflow/services/trash/__init__.py
"""
Trash and retention services for notes and folders.

Lifecycle: Active -> Deleted (recoverable for the retention window) -> purged.

Services:
- policy_service: Expiration arithmetic and urgency thresholds
- soft_delete_service: Single-entity soft delete / restore / purge
- restore_resolver: Where a restored note lands
- bulk_service: Batch restore / delete and empty trash
- sweep_service: Daily purge of expired trash
- audit_service: Append-only audit trail
- admin_role_service: Admin grants gating the cross-user audit view
- trash_service: User-facing operations tying the above together
"""

from noteflow.services.trash.admin_role_service import (
    grant_admin_role,
    is_admin,
    list_admin_roles,
    revoke_admin_role,
)
from noteflow.services.trash.audit_service import (
    AuditPurgeResult,
    AuditStats,
    get_audit_stats,
    purge_expired_audit_entries,
    query_all,
    query_for_user,
    record_entry,
)
from noteflow.services.trash.bulk_service import EmptyTrashResult, ItemResult
from noteflow.services.trash.errors import (
    AlreadyDeleted,
    NotDeleted,
    NotFound,
    TrashError,
    Unauthenticated,
    Unauthorized,
    ValidationError,
)
from noteflow.services.trash.policy_service import DEFAULT_POLICY, RetentionPolicy, Urgency
from noteflow.services.trash.restore_resolver import is_restoring_to_original, resolve_restore_target
from noteflow.services.trash.sweep_service import (
    RetentionSweeper,
    SweepResult,
    SweepState,
    preview_retention_sweep,
    run_retention_sweep,
)
from noteflow.services.trash.trash_service import (
    DeletedFolderView,
    DeletedNoteView,
    bulk_permanent_delete_notes,
    bulk_restore_notes,
    empty_trash,
    get_deleted_folders,
    get_deleted_items,
    get_user_audit_log,
    permanent_delete_folder,
    permanent_delete_note,
    restore_folder,
    restore_note,
    soft_delete_folder,
    soft_delete_note,
)

__all__ = [
    # Policy
    "RetentionPolicy",
    "Urgency",
    "DEFAULT_POLICY",
    # Errors
    "TrashError",
    "Unauthenticated",
    "Unauthorized",
    "NotFound",
    "NotDeleted",
    "AlreadyDeleted",
    "ValidationError",
    # Restore
    "resolve_restore_target",
    "is_restoring_to_original",
    # Operations
    "soft_delete_note",
    "restore_note",
    "permanent_delete_note",
    "soft_delete_folder",
    "restore_folder",
    "permanent_delete_folder",
    "bulk_restore_notes",
    "bulk_permanent_delete_notes",
    "empty_trash",
    "get_deleted_items",
    "get_deleted_folders",
    "get_user_audit_log",
    "DeletedNoteView",
    "DeletedFolderView",
    "ItemResult",
    "EmptyTrashResult",
    # Sweeper
    "RetentionSweeper",
    "SweepResult",
    "SweepState",
    "run_retention_sweep",
    "preview_retention_sweep",
    # Audit
    "record_entry",
    "query_for_user",
    "query_all",
    "get_audit_stats",
    "purge_expired_audit_entries",
    "AuditStats",
    "AuditPurgeResult",
    # Admin roles
    "is_admin",
    "grant_admin_role",
    "revoke_admin_role",
    "list_admin_roles",
]

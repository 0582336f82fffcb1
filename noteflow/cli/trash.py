# noteflow/cli/trash.py
"""
CLI commands for trash retention.

Usage:
    python -m noteflow.cli.trash status
    python -m noteflow.cli.trash sweep --dry-run
    python -m noteflow.cli.trash sweep
    python -m noteflow.cli.trash purge-audit --days 365 --confirm
    python -m noteflow.cli.trash grant-admin --user-id u_123 --email ops@example.com
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()


def get_db_session():
    """Get a database session."""
    from noteflow.database import SessionLocal

    return SessionLocal()


def cmd_status(args):
    """Show trash contents and what the next sweep would purge."""
    from sqlalchemy import func

    from noteflow.models import Folder, Note, TrashAuditLog
    from noteflow.services.trash.audit_service import get_audit_stats
    from noteflow.services.trash.policy_service import RetentionPolicy
    from noteflow.services.trash.sweep_service import preview_retention_sweep

    db = get_db_session()
    try:
        policy = RetentionPolicy.from_settings()
        preview = preview_retention_sweep(db)
        stats = get_audit_stats(db)

        print("\n=== Trash Status ===\n")

        print(f"Retention window: {policy.retention_days} days")
        print(f"  Warning at: {policy.warning_days} days left")
        print(f"  Urgent at: {policy.urgent_days} days left")

        print(f"\nNotes in trash: {db.query(func.count(Note.id)).filter(Note.is_deleted == True).scalar()}")
        print(f"Folders in trash: {db.query(func.count(Folder.id)).filter(Folder.is_deleted == True).scalar()}")
        print(f"Audit entries: {db.query(func.count(TrashAuditLog.id)).scalar()}")

        print("\nNext sweep would purge:")
        print(f"  Notes: {preview.notes_deleted}")
        print(f"  Folders: {preview.folders_deleted}")
        print(f"  Notes still filed under expired folders: {preview.cascaded_notes_deleted}")

        print(f"\nLast 30 days ({stats.period_start:%Y-%m-%d} to {stats.period_end:%Y-%m-%d}):")
        print(f"  Auto deletes: {stats.total_auto_deletes}")
        print(f"  Restores: {stats.total_restores}")
        print(f"  Permanent deletes: {stats.total_permanent_deletes}")
        print(f"  Bulk operations: {stats.total_bulk_operations}")

        print()
    finally:
        db.close()


def cmd_sweep(args):
    """Run (or preview) the retention sweep."""
    from noteflow.services.trash.sweep_service import preview_retention_sweep, run_retention_sweep

    db = get_db_session()
    try:
        print(f"\n{'DRY RUN - ' if args.dry_run else ''}Sweeping expired trash...\n")

        result = preview_retention_sweep(db) if args.dry_run else run_retention_sweep(db)

        print(f"Notes purged: {result.notes_deleted}")
        print(f"Folders purged: {result.folders_deleted}")
        print(f"Cascaded notes purged: {result.cascaded_notes_deleted}")
        print(f"Timestamp: {result.timestamp.isoformat()}")

        if result.errors:
            print("\nErrors:")
            for error in result.errors:
                print(f"  - {error}")

        if not result.success:
            sys.exit(1)
    finally:
        db.close()


def cmd_purge_audit(args):
    """Remove audit entries past the audit retention window."""
    from noteflow.services.trash.audit_service import purge_expired_audit_entries

    db = get_db_session()
    try:
        # Safety check
        if not args.dry_run and not args.confirm:
            print("Error: purge-audit requires --confirm flag for non-dry-run operations")
            print("Use --dry-run to preview what would be deleted")
            sys.exit(1)

        print(f"\n{'DRY RUN - ' if args.dry_run else ''}Purging audit entries...\n")

        result = purge_expired_audit_entries(db, older_than_days=args.days, dry_run=args.dry_run)

        print(f"Cutoff: {result.cutoff.isoformat()}")
        print(f"Entries {'to delete' if args.dry_run else 'deleted'}: {result.entries_deleted}")
    finally:
        db.close()


def cmd_grant_admin(args):
    """Grant an admin role."""
    from noteflow.services.trash.admin_role_service import grant_admin_role
    from noteflow.services.trash.errors import ValidationError

    db = get_db_session()
    try:
        try:
            role = grant_admin_role(db, args.user_id, args.email, role=args.role, granted_by="cli", reason=args.reason)
        except ValidationError as e:
            print(f"Error: {e.message}")
            sys.exit(1)
        print(f"Active {role.role} role for {role.email} (granted {role.granted_at:%Y-%m-%d})")
    finally:
        db.close()


def cmd_revoke_admin(args):
    """Revoke an admin role."""
    from noteflow.services.trash.admin_role_service import revoke_admin_role
    from noteflow.services.trash.errors import NotFound

    db = get_db_session()
    try:
        try:
            role = revoke_admin_role(db, args.email)
        except NotFound:
            print(f"Error: no active admin role for {args.email}")
            sys.exit(1)
        print(f"Revoked {role.role} role from {role.email}")
    finally:
        db.close()


def cmd_list_admins(args):
    """List admin roles."""
    from noteflow.services.trash.admin_role_service import list_admin_roles

    db = get_db_session()
    try:
        roles = list_admin_roles(db, include_revoked=args.all)

        print("\n=== Admin Roles ===\n")
        for role in roles:
            status = "[REVOKED]" if role.revoked_at else ""
            print(f"{role.email} ({role.role}) {status}")
            print(f"  User: {role.user_id}")
            print(f"  Granted: {role.granted_at:%Y-%m-%d} by {role.granted_by or 'unknown'}")
            print()
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(
        description="NoteFlow Trash Retention CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check current status
  python -m noteflow.cli.trash status

  # Preview what the sweep would purge
  python -m noteflow.cli.trash sweep --dry-run

  # Run the daily sweep (what the scheduler calls at 00:00 UTC)
  python -m noteflow.cli.trash sweep

  # Drop audit entries older than a year
  python -m noteflow.cli.trash purge-audit --confirm
        """,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # status command
    status_parser = subparsers.add_parser("status", help="Show trash status")
    status_parser.set_defaults(func=cmd_status)

    # sweep command
    sweep_parser = subparsers.add_parser("sweep", help="Purge expired trash")
    sweep_parser.add_argument("--dry-run", action="store_true", help="Preview only, don't purge")
    sweep_parser.set_defaults(func=cmd_sweep)

    # purge-audit command
    audit_parser = subparsers.add_parser("purge-audit", help="Purge old audit entries")
    audit_parser.add_argument(
        "--days", type=int, default=None, help="Age threshold in days (default: AUDIT_LOG_RETENTION_DAYS)"
    )
    audit_parser.add_argument("--dry-run", action="store_true", help="Preview only, don't delete")
    audit_parser.add_argument("--confirm", action="store_true", help="Confirm purge operation")
    audit_parser.set_defaults(func=cmd_purge_audit)

    # grant-admin command
    grant_parser = subparsers.add_parser("grant-admin", help="Grant an admin role")
    grant_parser.add_argument("--user-id", required=True, help="Identity provider subject")
    grant_parser.add_argument("--email", required=True, help="Email the role is matched on")
    grant_parser.add_argument("--role", choices=["admin", "superadmin"], default="admin")
    grant_parser.add_argument("--reason", default=None)
    grant_parser.set_defaults(func=cmd_grant_admin)

    # revoke-admin command
    revoke_parser = subparsers.add_parser("revoke-admin", help="Revoke an admin role")
    revoke_parser.add_argument("--email", required=True)
    revoke_parser.set_defaults(func=cmd_revoke_admin)

    # list-admins command
    list_parser = subparsers.add_parser("list-admins", help="List admin roles")
    list_parser.add_argument("--all", action="store_true", help="Include revoked roles")
    list_parser.set_defaults(func=cmd_list_admins)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()

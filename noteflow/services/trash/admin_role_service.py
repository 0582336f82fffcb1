# noteflow/services/trash/admin_role_service.py
"""
Database-driven admin roles.

A role is active while revoked_at is NULL; revoking keeps the row as a
record of who held access and when. Emails are matched case-insensitively.
"""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from noteflow.clock import Clock, system_clock
from noteflow.models import AdminRole, AdminRoleName
from noteflow.services.trash.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)


def _normalize(email: str) -> str:
    return email.strip().lower()


def get_active_role(db: Session, email: str | None) -> AdminRole | None:
    if not email or not email.strip():
        return None
    return (
        db.query(AdminRole)
        .filter(
            func.lower(AdminRole.email) == _normalize(email),
            AdminRole.revoked_at.is_(None),
        )
        .first()
    )


def is_admin(db: Session, email: str | None) -> bool:
    """True if `email` holds an admin role that has not been revoked."""
    return get_active_role(db, email) is not None


def grant_admin_role(
    db: Session,
    user_id: str,
    email: str,
    role: str = AdminRoleName.ADMIN.value,
    granted_by: str | None = None,
    reason: str | None = None,
    clock: Clock = system_clock,
) -> AdminRole:
    """
    Grant a role. Returns the existing active role unchanged if there is one.

    Raises:
        ValidationError: unknown role name or blank email
    """
    if role not in {r.value for r in AdminRoleName}:
        raise ValidationError(f"Unknown admin role: {role}")
    if not email or not email.strip():
        raise ValidationError("Email is required")

    existing = get_active_role(db, email)
    if existing:
        return existing

    admin_role = AdminRole(
        user_id=user_id,
        email=_normalize(email),
        role=role,
        granted_by=granted_by,
        reason=reason or f"Admin role granted by {granted_by or 'system'}",
        granted_at=clock.now(),
    )
    db.add(admin_role)
    db.commit()
    db.refresh(admin_role)

    logger.info(f"Granted {role} role to {admin_role.email}", extra={"user_id": user_id})
    return admin_role


def revoke_admin_role(db: Session, email: str, clock: Clock = system_clock) -> AdminRole:
    """
    Raises:
        NotFound: no active role for this email
    """
    admin_role = get_active_role(db, email)
    if admin_role is None:
        raise NotFound("No active admin role for this email")

    admin_role.revoked_at = clock.now()
    db.commit()

    logger.info(f"Revoked {admin_role.role} role from {admin_role.email}", extra={"user_id": admin_role.user_id})
    return admin_role


def list_admin_roles(db: Session, include_revoked: bool = False) -> list[AdminRole]:
    query = db.query(AdminRole)
    if not include_revoked:
        query = query.filter(AdminRole.revoked_at.is_(None))
    return query.order_by(AdminRole.granted_at.desc()).all()

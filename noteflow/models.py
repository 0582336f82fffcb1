# noteflow/models.py
"""
NoteFlow trash & retention database models

Tables:
- Folder: user folders, optionally nested, soft-deletable
- Note: user notes, soft-deletable, remembers the folder it was deleted from
- Tag / NoteTag: user tags and the note-tag junction purged with a note
- TrashAuditLog: append-only trail of every lifecycle transition
- AdminRole: database-driven admin access for the administrative audit view
"""

from datetime import datetime
from enum import Enum
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)

from noteflow.database import Base
from noteflow.lifecycle import Lifecycle, from_columns


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class AuditAction(str, Enum):
    """Lifecycle transitions recorded in the trash audit log."""
    SOFT_DELETE = "soft_delete"
    RESTORE = "restore"
    PERMANENT_DELETE = "permanent_delete"
    BULK_RESTORE = "bulk_restore"
    BULK_DELETE = "bulk_delete"
    AUTO_DELETE = "auto_delete"      # Retention sweeper
    EMPTY_TRASH = "empty_trash"      # One summary entry per empty-trash call


class ItemType(str, Enum):
    """Kinds of entity the trash handles."""
    NOTE = "note"
    FOLDER = "folder"


class AdminRoleName(str, Enum):
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


# -----------------------------------------------------------------------------
# Soft delete mixin
# -----------------------------------------------------------------------------

class SoftDeleteMixin:
    """Columns and accessor shared by soft-deletable entities."""

    is_deleted = Column(Boolean, default=False, nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    @property
    def lifecycle(self) -> Lifecycle:
        return from_columns(
            self.is_deleted,
            self.deleted_at,
            getattr(self, "deleted_from_folder_id", None),
        )

    @lifecycle.setter
    def lifecycle(self, state: Lifecycle) -> None:
        track_origin = hasattr(self, "deleted_from_folder_id")
        for key, value in state.to_columns(track_origin=track_origin).items():
            setattr(self, key, value)


# -----------------------------------------------------------------------------
# Folder
# -----------------------------------------------------------------------------

class Folder(SoftDeleteMixin, Base):
    """User folder. Deleting it never retroactively deletes its notes."""
    __tablename__ = "folders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    color = Column(String(32), nullable=True)
    parent_id = Column(Uuid, ForeignKey("folders.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_folders_user_deleted", "user_id", "is_deleted"),
        Index("ix_folders_deleted_at", "is_deleted", "deleted_at"),
        Index("ix_folders_parent_id", "parent_id"),
    )


# -----------------------------------------------------------------------------
# Note
# -----------------------------------------------------------------------------

class Note(SoftDeleteMixin, Base):
    """
    User note.

    folder_id has no enforced foreign key: the store offers no referential
    integrity, so folder cascades are application code (see services/trash).
    deleted_from_folder_id is captured only at deletion time.
    """
    __tablename__ = "notes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False)
    folder_id = Column(Uuid, nullable=True)

    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False, default="")
    is_pinned = Column(Boolean, default=False, nullable=False)

    deleted_from_folder_id = Column(Uuid, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_notes_user_deleted", "user_id", "is_deleted"),
        Index("ix_notes_deleted_at", "is_deleted", "deleted_at"),
        Index("ix_notes_folder_id", "folder_id"),
    )


# -----------------------------------------------------------------------------
# Tags
# -----------------------------------------------------------------------------

class Tag(Base):
    __tablename__ = "tags"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    color = Column(String(32), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_tags_user_name"),
    )


class NoteTag(Base):
    """Note-tag junction. Rows are removed explicitly when a note is purged."""
    __tablename__ = "note_tags"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    note_id = Column(Uuid, nullable=False)
    tag_id = Column(Uuid, nullable=False)

    __table_args__ = (
        Index("ix_note_tags_note_id", "note_id"),
        Index("ix_note_tags_tag_id", "tag_id"),
        UniqueConstraint("note_id", "tag_id", name="uq_note_tags_note_tag"),
    )


# -----------------------------------------------------------------------------
# TrashAuditLog
# -----------------------------------------------------------------------------

class TrashAuditLog(Base):
    """
    Append-only record of trash lifecycle transitions.

    item_id is deliberately not a foreign key: entries outlive the item they
    describe, and item_title keeps a display snapshot for that reason.
    action is free text; AuditAction lists the values this service writes.
    """
    __tablename__ = "trash_audit_log"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False)
    action = Column(String(64), nullable=False)
    item_type = Column(String(16), nullable=False)  # ItemType enum value
    item_id = Column(String(255), nullable=False)
    item_title = Column(Text, nullable=False, default="")
    timestamp = Column(DateTime, nullable=False)
    event_metadata = Column(JSON, nullable=True)

    __table_args__ = (
        Index("ix_trash_audit_log_user_id", "user_id"),
        Index("ix_trash_audit_log_timestamp", "timestamp"),
    )


# -----------------------------------------------------------------------------
# AdminRole
# -----------------------------------------------------------------------------

class AdminRole(Base):
    """Admin grant. Active while revoked_at is NULL."""
    __tablename__ = "admin_roles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    role = Column(String(32), nullable=False, default=AdminRoleName.ADMIN.value)
    granted_by = Column(String(255), nullable=True)
    reason = Column(Text, nullable=True)
    granted_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    revoked_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_admin_roles_email", "email", "revoked_at"),
        Index("ix_admin_roles_user_id", "user_id", "revoked_at"),
    )

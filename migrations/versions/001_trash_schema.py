"""Trash schema: notes, folders, tags, trash audit log, admin roles.

Notes and folders carry the soft delete columns (is_deleted, deleted_at)
and notes additionally remember deleted_from_folder_id. notes.folder_id has
no foreign key: folder cascades are done by the application.

Changes:
- Create folders, notes, tags, note_tags
- Create trash_audit_log (append-only, no FK to the items it describes)
- Create admin_roles for the administrative audit view

Revision ID: 001_trash_schema
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_trash_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create trash tables."""

    # -------------------------------------------------------------------------
    # 1. folders
    # -------------------------------------------------------------------------
    print("  Creating folders table...")

    op.create_table(
        'folders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('color', sa.String(length=32), nullable=True),
        sa.Column('parent_id', sa.Uuid(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['parent_id'], ['folders.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_folders_user_deleted', 'folders', ['user_id', 'is_deleted'], unique=False)
    op.create_index('ix_folders_deleted_at', 'folders', ['is_deleted', 'deleted_at'], unique=False)
    op.create_index('ix_folders_parent_id', 'folders', ['parent_id'], unique=False)

    # -------------------------------------------------------------------------
    # 2. notes
    # -------------------------------------------------------------------------
    print("  Creating notes table...")

    op.create_table(
        'notes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('folder_id', sa.Uuid(), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, server_default=''),
        sa.Column('is_pinned', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_from_folder_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notes_user_deleted', 'notes', ['user_id', 'is_deleted'], unique=False)
    op.create_index('ix_notes_deleted_at', 'notes', ['is_deleted', 'deleted_at'], unique=False)
    op.create_index('ix_notes_folder_id', 'notes', ['folder_id'], unique=False)

    # -------------------------------------------------------------------------
    # 3. tags / note_tags
    # -------------------------------------------------------------------------
    print("  Creating tags and note_tags tables...")

    op.create_table(
        'tags',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('color', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'name', name='uq_tags_user_name'),
    )

    op.create_table(
        'note_tags',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('note_id', sa.Uuid(), nullable=False),
        sa.Column('tag_id', sa.Uuid(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('note_id', 'tag_id', name='uq_note_tags_note_tag'),
    )
    op.create_index('ix_note_tags_note_id', 'note_tags', ['note_id'], unique=False)
    op.create_index('ix_note_tags_tag_id', 'note_tags', ['tag_id'], unique=False)

    # -------------------------------------------------------------------------
    # 4. trash_audit_log
    # -------------------------------------------------------------------------
    print("  Creating trash_audit_log table...")

    op.create_table(
        'trash_audit_log',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('item_type', sa.String(length=16), nullable=False),
        sa.Column('item_id', sa.String(length=255), nullable=False),
        sa.Column('item_title', sa.Text(), nullable=False, server_default=''),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('event_metadata', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_trash_audit_log_user_id', 'trash_audit_log', ['user_id'], unique=False)
    op.create_index('ix_trash_audit_log_timestamp', 'trash_audit_log', ['timestamp'], unique=False)

    # -------------------------------------------------------------------------
    # 5. admin_roles
    # -------------------------------------------------------------------------
    print("  Creating admin_roles table...")

    op.create_table(
        'admin_roles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='admin'),
        sa.Column('granted_by', sa.String(length=255), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('granted_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admin_roles_email', 'admin_roles', ['email', 'revoked_at'], unique=False)
    op.create_index('ix_admin_roles_user_id', 'admin_roles', ['user_id', 'revoked_at'], unique=False)

    print("  Trash schema created")


def downgrade() -> None:
    """Drop trash tables."""

    print("  Dropping admin_roles table...")
    op.drop_index('ix_admin_roles_user_id', table_name='admin_roles')
    op.drop_index('ix_admin_roles_email', table_name='admin_roles')
    op.drop_table('admin_roles')

    print("  Dropping trash_audit_log table...")
    op.drop_index('ix_trash_audit_log_timestamp', table_name='trash_audit_log')
    op.drop_index('ix_trash_audit_log_user_id', table_name='trash_audit_log')
    op.drop_table('trash_audit_log')

    print("  Dropping note_tags and tags tables...")
    op.drop_index('ix_note_tags_tag_id', table_name='note_tags')
    op.drop_index('ix_note_tags_note_id', table_name='note_tags')
    op.drop_table('note_tags')
    op.drop_table('tags')

    print("  Dropping notes table...")
    op.drop_index('ix_notes_folder_id', table_name='notes')
    op.drop_index('ix_notes_deleted_at', table_name='notes')
    op.drop_index('ix_notes_user_deleted', table_name='notes')
    op.drop_table('notes')

    print("  Dropping folders table...")
    op.drop_index('ix_folders_parent_id', table_name='folders')
    op.drop_index('ix_folders_deleted_at', table_name='folders')
    op.drop_index('ix_folders_user_deleted', table_name='folders')
    op.drop_table('folders')

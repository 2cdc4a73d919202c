"""Initial schema: users, notes, tags, versions, shares, notifications, refresh tokens

Revision ID: 0001_initial
Revises:
Create Date: 2025-09-20 10:12:31.418202

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('profile_picture', sa.String(length=500), nullable=True),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('email'),
        sa.CheckConstraint('length(email) <= 255', name='ck_users_email_len'),
        sa.CheckConstraint('length(name) <= 100', name='ck_users_name_len'),
        sa.CheckConstraint("role IN ('USER', 'ADMIN')", name='ck_users_role'),
    )
    op.create_index('idx_users_email', 'users', ['email'])
    op.create_index('idx_users_active', 'users', ['is_active'])
    op.create_index('idx_users_role', 'users', ['role'])

    op.create_table(
        'notes',
        _id(),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('visibility', sa.String(length=20), nullable=False),
        sa.Column('is_archived', sa.Boolean(), nullable=False),
        sa.Column('author_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('length(title) <= 200', name='ck_notes_title_len'),
        sa.CheckConstraint('length(body) <= 10000', name='ck_notes_body_len'),
        sa.CheckConstraint("visibility IN ('PRIVATE', 'SHARED', 'PUBLIC')", name='ck_notes_visibility'),
    )
    op.create_index('idx_notes_author_id', 'notes', ['author_id'])
    op.create_index('idx_notes_visibility', 'notes', ['visibility'])
    op.create_index('idx_notes_created_at', 'notes', ['created_at'])
    op.create_index('idx_notes_author_updated', 'notes', ['author_id', 'updated_at'])

    op.create_table(
        'note_tags',
        _id(),
        sa.Column('note_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('notes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        _created_at(),
        sa.UniqueConstraint('note_id', 'name', name='uq_note_tags_note_name'),
        sa.CheckConstraint('name = lower(name)', name='ck_note_tags_name_lowercase'),
        sa.CheckConstraint('length(name) <= 50', name='ck_note_tags_name_len'),
    )
    op.create_index('idx_note_tags_note_id', 'note_tags', ['note_id'])
    op.create_index('idx_note_tags_name', 'note_tags', ['name'])

    op.create_table(
        'note_versions',
        _id(),
        sa.Column('note_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('notes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('created_by_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        _created_at(),
        sa.UniqueConstraint('note_id', 'version', name='uq_note_versions_note_version'),
        sa.CheckConstraint('version >= 1', name='ck_note_versions_positive'),
    )
    op.create_index('idx_note_versions_note_id', 'note_versions', ['note_id'])

    op.create_table(
        'note_shares',
        _id(),
        sa.Column('note_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('notes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('permission', sa.String(length=20), nullable=False),
        _created_at(),
        sa.UniqueConstraint('note_id', 'user_id', name='uq_note_shares_note_user'),
        sa.CheckConstraint("permission IN ('VIEW')", name='ck_note_shares_permission'),
    )
    op.create_index('idx_note_shares_note_id', 'note_shares', ['note_id'])
    op.create_index('idx_note_shares_user_id', 'note_shares', ['user_id'])

    op.create_table(
        'notifications',
        _id(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(length=30), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('payload', postgresql.JSONB(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            "type IN ('NOTE_SHARED', 'NOTE_UPDATED', 'NOTE_DELETED', 'SYSTEM')",
            name='ck_notifications_type',
        ),
    )
    op.create_index('idx_notifications_user_read', 'notifications', ['user_id', 'is_read'])
    op.create_index('idx_notifications_user_created', 'notifications', ['user_id', 'created_at'])

    op.create_table(
        'refresh_tokens',
        _id(),
        sa.Column('token', sa.String(length=255), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revocation_reason', sa.String(length=100), nullable=True),
        _created_at(),
        sa.UniqueConstraint('token'),
    )
    op.create_index('idx_refresh_tokens_user_active', 'refresh_tokens', ['user_id', 'is_active'])
    op.create_index('idx_refresh_tokens_expires_at', 'refresh_tokens', ['expires_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('refresh_tokens')
    op.drop_table('notifications')
    op.drop_table('note_shares')
    op.drop_table('note_versions')
    op.drop_table('note_tags')
    op.drop_table('notes')
    op.drop_table('users')

"""Analytics: note views and user activity

Revision ID: 0002_analytics
Revises: 0001_initial
Create Date: 2025-10-02 14:41:07.553810

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0002_analytics'
down_revision: Union[str, Sequence[str], None] = '0001_initial'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'note_views',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('note_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('notes.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_note_views_note_created', 'note_views', ['note_id', 'created_at'])
    op.create_index('idx_note_views_user_created', 'note_views', ['user_id', 'created_at'])

    op.create_table(
        'user_activities',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('activity', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('details', postgresql.JSONB(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "activity IN ('login', 'note_create', 'note_update', 'note_restore', 'note_delete', 'note_share')",
            name='ck_user_activities_activity',
        ),
    )
    op.create_index('idx_user_activities_user_created', 'user_activities', ['user_id', 'created_at'])
    op.create_index('idx_user_activities_activity', 'user_activities', ['activity'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('user_activities')
    op.drop_table('note_views')

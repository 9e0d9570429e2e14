"""initial_schema

Revision ID: 4c1d7e9a2b30
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1d7e9a2b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create worlds, timelines, timeline_events and timeline_event_timelines.

    timeline_event_timelines holds each event's position on a timeline;
    (timeline_id, timeline_event_id) is unique and position is non-negative.
    """
    op.create_table(
        'worlds',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('era_order', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("name != ''", name='ck_world_non_empty_name'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index('ix_worlds_slug', 'worlds', ['slug'], unique=True)

    op.create_table(
        'timelines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('world_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("name != ''", name='ck_timeline_non_empty_name'),
        sa.ForeignKeyConstraint(['world_id'], ['worlds.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('world_id', 'name', name='uq_timeline_world_name'),
    )
    op.create_index('ix_timelines_world_id', 'timelines', ['world_id'])

    op.create_table(
        'timeline_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('world_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('date_data', sa.JSON(), nullable=True),
        sa.Column('date_text', sa.String(length=255), nullable=True),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('month', sa.Integer(), nullable=True),
        sa.Column('day', sa.Integer(), nullable=True),
        sa.Column('categories', sa.JSON(), nullable=False),
        sa.Column('is_key_event', sa.Boolean(), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("title != ''", name='ck_timeline_event_non_empty_title'),
        sa.ForeignKeyConstraint(['world_id'], ['worlds.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_timeline_events_world_id', 'timeline_events', ['world_id'])
    op.create_index('ix_timeline_events_year', 'timeline_events', ['year'])

    op.create_table(
        'timeline_event_timelines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('timeline_id', sa.Integer(), nullable=False),
        sa.Column('timeline_event_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('position >= 0', name='ck_membership_non_negative_position'),
        sa.ForeignKeyConstraint(['timeline_id'], ['timelines.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['timeline_event_id'], ['timeline_events.id'], ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'timeline_id', 'timeline_event_id', name='uq_timeline_membership'
        ),
    )
    op.create_index(
        'ix_timeline_event_timelines_timeline_id',
        'timeline_event_timelines',
        ['timeline_id'],
    )
    op.create_index(
        'ix_timeline_event_timelines_timeline_event_id',
        'timeline_event_timelines',
        ['timeline_event_id'],
    )


def downgrade() -> None:
    """Drop every Lorekeeper table."""
    op.drop_table('timeline_event_timelines')
    op.drop_table('timeline_events')
    op.drop_table('timelines')
    op.drop_index('ix_worlds_slug', table_name='worlds')
    op.drop_table('worlds')

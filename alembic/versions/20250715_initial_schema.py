"""Initial schema: cases and case_notes

Revision ID: 001_initial
Revises:
Create Date: 2025-07-15 00:00:00.000000

Creates:
  - cases: searchable fields as columns, person/location/contact as JSON
  - case_notes: append-only audit trail ordered by position
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


case_status = sa.Enum('active', 'found', 'closed', 'dismissed', name='casestatus')
case_priority = sa.Enum('low', 'medium', 'high', 'critical', name='casepriority')
case_category = sa.Enum('missing-person', 'runaway', 'other', name='casecategory')


def upgrade() -> None:
    """Create cases and case_notes tables."""

    op.create_table(
        'cases',
        sa.Column('id', sa.String(length=24), nullable=False),
        sa.Column('case_number', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('missing_person_name', sa.String(length=100), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('missing_person', sa.JSON(), nullable=False),
        sa.Column('last_known_location', sa.JSON(), nullable=False),
        sa.Column('contact_info', sa.JSON(), nullable=False),
        sa.Column('last_seen_date', sa.Date(), nullable=False),
        sa.Column('last_seen_time', sa.String(length=20), nullable=False),
        sa.Column('circumstances', sa.Text(), nullable=False),
        sa.Column('status', case_status, nullable=False),
        sa.Column('priority', case_priority, nullable=False),
        sa.Column('category', case_category, nullable=False),
        sa.Column('reported_by', sa.String(length=100), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_cases_case_number'), 'cases', ['case_number'], unique=True)
    op.create_index(op.f('ix_cases_status'), 'cases', ['status'], unique=False)
    op.create_index(op.f('ix_cases_reported_by'), 'cases', ['reported_by'], unique=False)
    op.create_index(op.f('ix_cases_created_at'), 'cases', ['created_at'], unique=False)

    op.create_table(
        'case_notes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('case_id', sa.String(length=24), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('added_by', sa.String(length=100), nullable=False),
        sa.Column('added_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['case_id'], ['cases.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('case_id', 'position', name='uq_case_notes_position'),
    )
    op.create_index(op.f('ix_case_notes_case_id'), 'case_notes', ['case_id'], unique=False)


def downgrade() -> None:
    """Drop case tables."""
    op.drop_index(op.f('ix_case_notes_case_id'), table_name='case_notes')
    op.drop_table('case_notes')

    op.drop_index(op.f('ix_cases_created_at'), table_name='cases')
    op.drop_index(op.f('ix_cases_reported_by'), table_name='cases')
    op.drop_index(op.f('ix_cases_status'), table_name='cases')
    op.drop_index(op.f('ix_cases_case_number'), table_name='cases')
    op.drop_table('cases')

    bind = op.get_bind()
    case_category.drop(bind, checkfirst=True)
    case_priority.drop(bind, checkfirst=True)
    case_status.drop(bind, checkfirst=True)

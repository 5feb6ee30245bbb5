"""universities catalogue and follow-ups

Revision ID: 8b2e4d61c9a3
Revises: 3f9a1c2d7b40
Create Date: 2025-04-02

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b2e4d61c9a3'
down_revision: Union[str, Sequence[str], None] = '3f9a1c2d7b40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(12, 2), nullable=True)


def upgrade() -> None:
    # ==================== UNIVERSITIES ====================
    op.create_table(
        'universities',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('campus_city', sa.String(100), nullable=True),
        sa.Column('website', sa.String(500), nullable=True),
        sa.Column('cover_image_url', sa.String(500), nullable=True),
        sa.Column('logo_image_url', sa.String(500), nullable=True),
        sa.Column('about', sa.Text(), nullable=True),
        _money('total_fees'),
        _money('initial_deposit_amount'),
        _money('scholarship_fee'),
        sa.Column('merit_scholarships', sa.Text(), nullable=True),
        sa.Column('ug_entry_criteria', sa.Text(), nullable=True),
        sa.Column('pg_entry_criteria', sa.Text(), nullable=True),
        sa.Column('elt_requirements', sa.Text(), nullable=True),
        sa.Column('moi_policy', sa.Text(), nullable=True),
        sa.Column('study_gap', sa.String(255), nullable=True),
        sa.Column('priority', sa.String(50), nullable=True),
        sa.Column('drive_url', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_universities_name', 'universities', ['name'], unique=True)
    op.create_index('ix_universities_country', 'universities', ['country'])
    op.create_index('ix_universities_created_at', 'universities', ['created_at'])

    op.create_table(
        'university_intakes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('university_id', sa.Uuid(), sa.ForeignKey('universities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('intake_label', sa.String(100), nullable=False),
    )
    op.create_index('ix_university_intakes_university_id', 'university_intakes', ['university_id'])

    op.create_table(
        'university_accepted_elts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('university_id', sa.Uuid(), sa.ForeignKey('universities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('elt_name', sa.String(100), nullable=False),
    )
    op.create_index('ix_university_accepted_elts_university_id', 'university_accepted_elts', ['university_id'])

    op.create_table(
        'university_courses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('university_id', sa.Uuid(), sa.ForeignKey('universities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        _money('fees'),
        sa.Column('is_top_course', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index('ix_university_courses_university_id', 'university_courses', ['university_id'])
    op.create_index('ix_university_courses_category', 'university_courses', ['category'])
    op.create_index('ix_university_courses_created_at', 'university_courses', ['created_at'])

    # ==================== FOLLOW-UPS ====================
    op.create_table(
        'follow_ups',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.String(64), nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('follow_up_on', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_follow_up_user_due', 'follow_ups', ['user_id', 'follow_up_on'])
    op.create_index('ix_follow_up_entity', 'follow_ups', ['entity_type', 'entity_id'])


def downgrade() -> None:
    op.drop_table('follow_ups')
    op.drop_table('university_courses')
    op.drop_table('university_accepted_elts')
    op.drop_table('university_intakes')
    op.drop_table('universities')

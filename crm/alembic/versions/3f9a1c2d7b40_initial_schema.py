"""initial schema

Revision ID: 3f9a1c2d7b40
Revises:
Create Date: 2025-03-07

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9a1c2d7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_ROLES = (
    'super_admin', 'admin', 'admin_staff', 'regional_manager', 'branch_manager',
    'counselor', 'admission_officer', 'partner', 'processing',
)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def _scope_columns(owners=('counsellor_id', 'admission_officer_id', 'partner')):
    columns = [
        sa.Column(owner, sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
        for owner in owners
    ]
    columns += [
        sa.Column('region_id', sa.Uuid(), sa.ForeignKey('regions.id', ondelete='SET NULL'), nullable=True),
        sa.Column('branch_id', sa.Uuid(), sa.ForeignKey('branches.id', ondelete='SET NULL'), nullable=True),
    ]
    return columns


def _scope_indexes(table: str, owners=('counsellor_id', 'admission_officer_id', 'partner')) -> None:
    for column in (*owners, 'region_id', 'branch_id', 'created_at'):
        op.create_index(f'ix_{table}_{column}', table, [column])


def upgrade() -> None:
    # ==================== ORGANISATION ====================
    op.create_table(
        'regions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('manager_id', sa.Uuid(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_regions_name', 'regions', ['name'], unique=True)

    op.create_table(
        'branches',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('region_id', sa.Uuid(), sa.ForeignKey('regions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('manager_id', sa.Uuid(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('region_id', 'name', name='uq_branch_region_name'),
    )
    op.create_index('ix_branches_name', 'branches', ['name'])
    op.create_index('ix_branches_region_id', 'branches', ['region_id'])

    # ==================== USERS ====================
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_temporary_password', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('role', sa.Enum(*USER_ROLES, name='user_role'), nullable=False),
        sa.Column('region_id', sa.Uuid(), sa.ForeignKey('regions.id', ondelete='SET NULL'), nullable=True),
        sa.Column('branch_id', sa.Uuid(), sa.ForeignKey('branches.id', ondelete='SET NULL'), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_region_id', 'users', ['region_id'])
    op.create_index('ix_users_branch_id', 'users', ['branch_id'])

    op.create_foreign_key(
        'fk_regions_manager_id', 'regions', 'users', ['manager_id'], ['id'], ondelete='SET NULL'
    )
    op.create_foreign_key(
        'fk_branches_manager_id', 'branches', 'users', ['manager_id'], ['id'], ondelete='SET NULL'
    )

    # ==================== LEADS ====================
    op.create_table(
        'leads',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('program', sa.String(255), nullable=True),
        sa.Column('source', sa.String(100), nullable=True),
        sa.Column('status', sa.String(50), nullable=False, server_default='new'),
        sa.Column('expectation', sa.Text(), nullable=True),
        sa.Column('type', sa.String(50), nullable=True),
        sa.Column('study_level', sa.String(100), nullable=True),
        sa.Column('study_plan', sa.String(100), nullable=True),
        sa.Column('elt', sa.String(100), nullable=True),
        sa.Column('lost_reason', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_scope_columns(owners=('counsellor_id', 'partner')),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_leads_email', 'leads', ['email'])
    op.create_index('ix_leads_status', 'leads', ['status'])
    op.create_index('ix_lead_branch_status', 'leads', ['branch_id', 'status'])
    _scope_indexes('leads', owners=('counsellor_id', 'partner'))

    # ==================== STUDENTS ====================
    op.create_table(
        'students',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('student_code', sa.String(32), nullable=False),
        sa.Column('lead_id', sa.Uuid(), sa.ForeignKey('leads.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('nationality', sa.String(100), nullable=True),
        sa.Column('passport_number', sa.String(50), nullable=True),
        sa.Column('academic_background', sa.Text(), nullable=True),
        sa.Column('english_proficiency', sa.String(100), nullable=True),
        sa.Column('target_country', sa.String(100), nullable=True),
        sa.Column('target_program', sa.String(255), nullable=True),
        sa.Column('budget', sa.String(100), nullable=True),
        sa.Column('status', sa.String(50), nullable=False, server_default='active'),
        sa.Column('notes', sa.Text(), nullable=True),
        *_scope_columns(),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_students_student_code', 'students', ['student_code'], unique=True)
    op.create_index('ix_students_lead_id', 'students', ['lead_id'])
    op.create_index('ix_students_email', 'students', ['email'])
    op.create_index('ix_students_status', 'students', ['status'])
    op.create_index('ix_student_branch_status', 'students', ['branch_id', 'status'])
    _scope_indexes('students')

    # ==================== APPLICATIONS ====================
    op.create_table(
        'applications',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('application_code', sa.String(32), nullable=False),
        sa.Column('student_id', sa.Uuid(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('university', sa.String(255), nullable=False),
        sa.Column('program', sa.String(255), nullable=False),
        sa.Column('course_type', sa.String(100), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('intake', sa.String(50), nullable=True),
        sa.Column('channel_partner', sa.String(255), nullable=True),
        sa.Column('app_status', sa.String(50), nullable=False, server_default='open'),
        sa.Column('case_status', sa.String(50), nullable=True),
        sa.Column('google_drive_link', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_scope_columns(),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_applications_application_code', 'applications', ['application_code'], unique=True)
    op.create_index('ix_applications_student_id', 'applications', ['student_id'])
    op.create_index('ix_applications_app_status', 'applications', ['app_status'])
    op.create_index('ix_application_student_status', 'applications', ['student_id', 'app_status'])
    _scope_indexes('applications')

    # ==================== ADMISSIONS ====================
    op.create_table(
        'admissions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('application_id', sa.Uuid(), sa.ForeignKey('applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.Uuid(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('university', sa.String(255), nullable=False),
        sa.Column('program', sa.String(255), nullable=False),
        sa.Column('decision', sa.String(50), nullable=False),
        sa.Column('decision_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scholarship_amount', sa.String(50), nullable=True),
        sa.Column('conditions', sa.Text(), nullable=True),
        sa.Column('deposit_required', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('deposit_amount', sa.String(50), nullable=True),
        sa.Column('deposit_deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('visa_status', sa.String(50), nullable=False, server_default='pending'),
        sa.Column('notes', sa.Text(), nullable=True),
        *_scope_columns(),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_admissions_application_id', 'admissions', ['application_id'])
    op.create_index('ix_admissions_student_id', 'admissions', ['student_id'])
    _scope_indexes('admissions')

    # ==================== EVENTS ====================
    op.create_table(
        'events',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('type', sa.String(100), nullable=True),
        sa.Column('date', sa.Date(), nullable=True),
        sa.Column('time', sa.String(20), nullable=True),
        sa.Column('venue', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_scope_columns(owners=()),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    _scope_indexes('events', owners=())

    op.create_table(
        'event_registrations',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('registration_code', sa.String(32), nullable=False),
        sa.Column('event_id', sa.Uuid(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('number', sa.String(50), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('source', sa.String(100), nullable=True),
        sa.Column('status', sa.String(50), nullable=False, server_default='attending'),
        sa.Column('lead_id', sa.Uuid(), sa.ForeignKey('leads.id', ondelete='SET NULL'), nullable=True),
        *_scope_columns(owners=()),
        *_timestamps(),
    )
    op.create_index(
        'ix_event_registrations_registration_code', 'event_registrations', ['registration_code'], unique=True
    )
    op.create_index('ix_event_registrations_event_id', 'event_registrations', ['event_id'])
    op.create_index('ix_registration_event_email', 'event_registrations', ['event_id', 'email'])
    op.create_index('ix_registration_event_number', 'event_registrations', ['event_id', 'number'])
    _scope_indexes('event_registrations', owners=())

    # ==================== ACTIVITIES ====================
    op.create_table(
        'activities',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.String(64), nullable=False),
        sa.Column('activity_type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('field_name', sa.String(100), nullable=True),
        sa.Column('old_value', sa.Text(), nullable=True),
        sa.Column('new_value', sa.Text(), nullable=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('user_name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index('ix_activity_entity', 'activities', ['entity_type', 'entity_id'])


def downgrade() -> None:
    op.drop_table('activities')
    op.drop_table('event_registrations')
    op.drop_table('events')
    op.drop_table('admissions')
    op.drop_table('applications')
    op.drop_table('students')
    op.drop_table('leads')
    op.drop_constraint('fk_branches_manager_id', 'branches', type_='foreignkey')
    op.drop_constraint('fk_regions_manager_id', 'regions', type_='foreignkey')
    op.drop_table('users')
    op.drop_table('branches')
    op.drop_table('regions')
    sa.Enum(name='user_role').drop(op.get_bind(), checkfirst=True)

"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


case_kind = sa.Enum('DATA_PRINCIPAL_REQUEST', 'GRIEVANCE', name='casekind')
request_type = sa.Enum('ACCESS', 'CORRECTION', 'NOMINATION', 'ERASURE', name='requesttype')
user_role = sa.Enum('ADMIN', 'USER', name='userrole')


def upgrade():
    op.create_table(
        'industries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
    )
    op.create_index('ix_industries_id', 'industries', ['id'])

    op.create_table(
        'request_statuses',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('name', sa.String(50), nullable=False, unique=True),
        sa.Column('sla_days', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_terminal', sa.Boolean(), nullable=False),
    )

    op.create_table(
        'organisations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('business_name', sa.String(255), nullable=False),
        sa.Column('business_address', sa.Text(), nullable=False),
        sa.Column('industry_id', sa.Integer(), sa.ForeignKey('industries.id', ondelete='SET NULL'), nullable=True),
        sa.Column('contact_person_name', sa.String(255), nullable=False),
        sa.Column('contact_email_address', sa.String(255), nullable=False),
        sa.Column('contact_phone_number', sa.String(50), nullable=False),
        sa.Column('no_of_users', sa.Integer(), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=False),
    )
    op.create_index('ix_organisations_id', 'organisations', ['id'])
    op.create_index('ix_organisations_business_name', 'organisations', ['business_name'])
    op.create_index('idx_org_industry', 'organisations', ['industry_id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('organisation_id', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('idx_user_org_active', 'users', ['organisation_id', 'is_active'])

    op.create_table(
        'cases',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('kind', case_kind, nullable=False),
        sa.Column('request_type', request_type, nullable=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('assigned_to', sa.Integer(), nullable=False),
        sa.Column('status_id', sa.Integer(), sa.ForeignKey('request_statuses.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_on_time', sa.Boolean(), nullable=False),
        sa.Column('closure_comment', sa.Text(), nullable=False),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('organisation_id', sa.Integer(), sa.ForeignKey('organisations.id', ondelete='CASCADE'), nullable=False),
    )
    op.create_index('ix_cases_id', 'cases', ['id'])
    op.create_index('ix_cases_kind', 'cases', ['kind'])
    op.create_index('idx_case_org_status', 'cases', ['organisation_id', 'status_id'])
    op.create_index('idx_case_org_kind', 'cases', ['organisation_id', 'kind'])
    op.create_index('idx_case_assignee', 'cases', ['assigned_to'])

    op.create_table(
        'case_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('case_id', sa.Integer(), sa.ForeignKey('cases.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status_id', sa.Integer(), nullable=False),
        sa.Column('status_name', sa.String(50), nullable=False),
        sa.Column('assigned_to', sa.Integer(), nullable=False),
        sa.Column('assigned_to_name', sa.String(255), nullable=False),
        sa.Column('updated_by', sa.Integer(), nullable=False),
        sa.Column('updated_by_name', sa.String(255), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('organisation_id', sa.Integer(), nullable=False),
    )
    op.create_index('ix_case_history_id', 'case_history', ['id'])
    op.create_index('idx_history_case', 'case_history', ['case_id', 'id'])


def downgrade():
    op.drop_table('case_history')
    op.drop_table('cases')
    op.drop_table('users')
    op.drop_table('organisations')
    op.drop_table('request_statuses')
    op.drop_table('industries')

    bind = op.get_bind()
    for enum in (case_kind, request_type, user_role):
        enum.drop(bind, checkfirst=True)

"""Account lifecycle schema: plans, accounts, app users and view-as sessions

Revision ID: 0001_lifecycle_schema
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '0001_lifecycle_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'plans',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('billing_period', sa.String(32), nullable=False),
        sa.Column('features', sa.JSON(), nullable=False),
        sa.Column('feature_list', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_plans_name', 'plans', ['name'])
    op.create_index('ix_plans_type', 'plans', ['type'])
    op.create_index('ix_plans_status', 'plans', ['status'])

    op.create_table(
        'accounts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('parent_id', sa.Uuid(), sa.ForeignKey('accounts.id'), nullable=True),
        sa.Column('plan_id', sa.Uuid(), sa.ForeignKey('plans.id'), nullable=False),
        sa.Column('plan_status', sa.String(32), nullable=False),
        sa.Column('trial_ends_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(32), nullable=False),
        sa.Column('limits', sa.JSON(), nullable=False),
        sa.Column('primary_contact', sa.JSON(), nullable=False),
        sa.Column('location', sa.JSON(), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    # Slug uniqueness is enforced here, not only by the allocator
    op.create_index('ix_accounts_slug', 'accounts', ['slug'], unique=True)
    op.create_index('ix_accounts_name', 'accounts', ['name'])
    op.create_index('ix_accounts_type', 'accounts', ['type'])
    op.create_index('ix_accounts_parent_id', 'accounts', ['parent_id'])
    op.create_index('ix_accounts_plan_id', 'accounts', ['plan_id'])
    op.create_index('ix_accounts_plan_status', 'accounts', ['plan_status'])
    op.create_index('ix_accounts_status', 'accounts', ['status'])

    op.create_table(
        'app_users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('account_id', sa.Uuid(), sa.ForeignKey('accounts.id'), nullable=True),
        sa.Column('account_type', sa.String(32), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('role', sa.String(32), nullable=False),
        sa.Column('status', sa.String(32), nullable=False),
        sa.Column('email_verified', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_app_users_email', 'app_users', ['email'], unique=True)
    op.create_index('ix_app_users_account_id', 'app_users', ['account_id'])
    op.create_index('ix_app_users_role', 'app_users', ['role'])
    op.create_index('ix_app_users_status', 'app_users', ['status'])

    op.create_table(
        'view_as_sessions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('super_admin_id', sa.Uuid(), sa.ForeignKey('app_users.id'), nullable=False),
        sa.Column('viewing_account_id', sa.Uuid(), sa.ForeignKey('accounts.id'), nullable=False),
        sa.Column('viewing_user_id', sa.Uuid(), sa.ForeignKey('app_users.id'), nullable=False),
        sa.Column('session_token', sa.String(128), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_view_as_sessions_session_token', 'view_as_sessions', ['session_token'], unique=True)
    op.create_index('ix_view_as_sessions_super_admin_id', 'view_as_sessions', ['super_admin_id'])
    op.create_index('ix_view_as_sessions_viewing_account_id', 'view_as_sessions', ['viewing_account_id'])
    op.create_index('ix_view_as_sessions_viewing_user_id', 'view_as_sessions', ['viewing_user_id'])
    op.create_index('ix_view_as_sessions_expires_at', 'view_as_sessions', ['expires_at'])


def downgrade():
    op.drop_table('view_as_sessions')
    op.drop_table('app_users')
    op.drop_table('accounts')
    op.drop_table('plans')

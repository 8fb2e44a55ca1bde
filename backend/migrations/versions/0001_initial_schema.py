"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the complete MAMS schema:
- users / session_tokens: identity and hashed session tokens
- assets: per-base equipment balances
- transfers / purchases / assignments / expenditures: movements
- activity_logs: append-only audit trail
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamp(name: str, nullable: bool = False):
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False,
                     server_default=sa.text('CURRENT_TIMESTAMP'))


def upgrade():
    # ============================================================================
    # users
    # ============================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=128), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('assigned_base', sa.String(length=128), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        _timestamp('last_login_at', nullable=True),
        sa.CheckConstraint(
            "role IN ('Admin', 'BaseCommander', 'LogisticsOfficer')",
            name='ck_users_role',
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_assigned_base', 'users', ['assigned_base'])

    # ============================================================================
    # session_tokens: one row per login, only the SHA-256 of the token stored
    # ============================================================================
    op.create_table(
        'session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        _timestamp('created_at'),
        _timestamp('last_used_at'),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default='0'),
        _timestamp('revoked_at', nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_session_tokens_token_hash', 'session_tokens', ['token_hash'], unique=True)
    op.create_index('ix_session_tokens_user_id', 'session_tokens', ['user_id'])
    op.create_index('ix_session_tokens_expires_at', 'session_tokens', ['expires_at'])
    op.create_index('ix_session_tokens_is_revoked', 'session_tokens', ['is_revoked'])
    op.create_index('ix_session_tokens_user_active', 'session_tokens', ['user_id', 'is_revoked'])

    # ============================================================================
    # assets
    # ============================================================================
    op.create_table(
        'assets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('type', sa.String(length=64), nullable=False),
        sa.Column('base', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('opening_balance', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('closing_balance', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('purchases', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('transfer_in', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('transfer_out', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('assigned', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('expended', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('available', sa.Integer(), nullable=False, server_default='0'),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', 'type', 'base', name='uq_assets_name_type_base'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_assets_type', 'assets', ['type'])
    op.create_index('ix_assets_base', 'assets', ['base'])
    op.create_index('ix_assets_base_type', 'assets', ['base', 'type'])

    # ============================================================================
    # transfers
    # ============================================================================
    op.create_table(
        'transfers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('from_base', sa.String(length=128), nullable=False),
        sa.Column('to_base', sa.String(length=128), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('transferred_by_id', sa.Integer(), nullable=False),
        sa.Column('approved_by_id', sa.Integer(), nullable=True),
        _timestamp('created_at'),
        _timestamp('completed_at', nullable=True),
        sa.CheckConstraint('quantity > 0', name='ck_transfers_quantity_positive'),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id'], ),
        sa.ForeignKeyConstraint(['transferred_by_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['approved_by_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_transfers_asset_id', 'transfers', ['asset_id'])
    op.create_index('ix_transfers_status', 'transfers', ['status'])
    op.create_index('ix_transfers_created_at', 'transfers', ['created_at'])
    op.create_index('ix_transfers_from_base_created', 'transfers', ['from_base', 'created_at'])
    op.create_index('ix_transfers_to_base_created', 'transfers', ['to_base', 'created_at'])

    # ============================================================================
    # purchases
    # ============================================================================
    op.create_table(
        'purchases',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('base', sa.String(length=128), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_cost', sa.Numeric(12, 2), nullable=True),
        sa.Column('supplier', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Pending'),
        sa.Column('purchased_by_id', sa.Integer(), nullable=False),
        sa.Column('approved_by_id', sa.Integer(), nullable=True),
        _timestamp('purchase_date'),
        _timestamp('created_at'),
        sa.CheckConstraint('quantity > 0', name='ck_purchases_quantity_positive'),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id'], ),
        sa.ForeignKeyConstraint(['purchased_by_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['approved_by_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_purchases_asset_id', 'purchases', ['asset_id'])
    op.create_index('ix_purchases_status', 'purchases', ['status'])
    op.create_index('ix_purchases_purchase_date', 'purchases', ['purchase_date'])
    op.create_index('ix_purchases_base_date', 'purchases', ['base', 'purchase_date'])

    # ============================================================================
    # assignments
    # ============================================================================
    op.create_table(
        'assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('base', sa.String(length=128), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('assigned_to', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='Active'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('assigned_by_id', sa.Integer(), nullable=False),
        _timestamp('start_date'),
        _timestamp('end_date', nullable=True),
        _timestamp('created_at'),
        sa.CheckConstraint('quantity > 0', name='ck_assignments_quantity_positive'),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id'], ),
        sa.ForeignKeyConstraint(['assigned_by_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_assignments_asset_id', 'assignments', ['asset_id'])
    op.create_index('ix_assignments_status', 'assignments', ['status'])
    op.create_index('ix_assignments_start_date', 'assignments', ['start_date'])
    op.create_index('ix_assignments_base_start', 'assignments', ['base', 'start_date'])

    # ============================================================================
    # expenditures
    # ============================================================================
    op.create_table(
        'expenditures',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('asset_id', sa.Integer(), nullable=False),
        sa.Column('base', sa.String(length=128), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('authorized_by_id', sa.Integer(), nullable=False),
        _timestamp('expenditure_date'),
        _timestamp('created_at'),
        sa.CheckConstraint('quantity > 0', name='ck_expenditures_quantity_positive'),
        sa.ForeignKeyConstraint(['asset_id'], ['assets.id'], ),
        sa.ForeignKeyConstraint(['authorized_by_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_expenditures_asset_id', 'expenditures', ['asset_id'])
    op.create_index('ix_expenditures_expenditure_date', 'expenditures', ['expenditure_date'])
    op.create_index('ix_expenditures_base_date', 'expenditures', ['base', 'expenditure_date'])

    # ============================================================================
    # activity_logs: append-only, user_id NULL for unknown-username login failures
    # ============================================================================
    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('username', sa.String(length=64), nullable=True),
        sa.Column('action', sa.String(length=32), nullable=False),
        sa.Column('resource_type', sa.String(length=64), nullable=False),
        sa.Column('resource_id', sa.Integer(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        _timestamp('occurred_at'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_activity_logs_user_id', 'activity_logs', ['user_id'])
    op.create_index('ix_activity_logs_username', 'activity_logs', ['username'])
    op.create_index('ix_activity_logs_action', 'activity_logs', ['action'])
    op.create_index('ix_activity_logs_occurred_at', 'activity_logs', ['occurred_at'])
    op.create_index('ix_activity_logs_user_action', 'activity_logs', ['user_id', 'action'])
    op.create_index('ix_activity_logs_resource', 'activity_logs', ['resource_type', 'resource_id'])


def downgrade():
    op.drop_table('activity_logs')
    op.drop_table('expenditures')
    op.drop_table('assignments')
    op.drop_table('purchases')
    op.drop_table('transfers')
    op.drop_table('assets')
    op.drop_table('session_tokens')
    op.drop_table('users')

"""initial_schema

Revision ID: 001
Revises:
Create Date: 2025-03-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True)


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table('users'):
        op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('approved_by', sa.String(length=36), nullable=True),
        sa.Column('status_changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
        op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)
        op.create_index(op.f('ix_users_status'), 'users', ['status'], unique=False)

    if not inspector.has_table('trainer_clients'):
        op.create_table('trainer_clients',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('trainer_id', sa.String(length=36), nullable=False),
        sa.Column('client_id', sa.String(length=36), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('trainer_id', 'client_id', name='uq_trainer_client')
        )
        op.create_index(op.f('ix_trainer_clients_trainer_id'), 'trainer_clients', ['trainer_id'], unique=False)
        op.create_index(op.f('ix_trainer_clients_client_id'), 'trainer_clients', ['client_id'], unique=False)

    if not inspector.has_table('training_plans'):
        op.create_table('training_plans',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('client_id', sa.String(length=36), nullable=True),
        sa.Column('trainer_id', sa.String(length=36), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('content', sa.JSON(), nullable=True),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_training_plans_status'), 'training_plans', ['status'], unique=False)
        op.create_index(op.f('ix_training_plans_client_id'), 'training_plans', ['client_id'], unique=False)
        op.create_index(op.f('ix_training_plans_trainer_id'), 'training_plans', ['trainer_id'], unique=False)

    if not inspector.has_table('training_sessions'):
        op.create_table('training_sessions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('trainer_id', sa.String(length=36), nullable=True),
        sa.Column('client_id', sa.String(length=36), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('duration_min', sa.Integer(), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=30), nullable=True),
        sa.Column('client_attendance_status', sa.String(length=30), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        _created_at(),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_training_sessions_trainer_id'), 'training_sessions', ['trainer_id'], unique=False)
        op.create_index(op.f('ix_training_sessions_client_id'), 'training_sessions', ['client_id'], unique=False)
        op.create_index(op.f('ix_training_sessions_scheduled_at'), 'training_sessions', ['scheduled_at'], unique=False)

    if not inspector.has_table('session_requests'):
        op.create_table('session_requests',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('client_id', sa.String(length=36), nullable=False),
        sa.Column('trainer_id', sa.String(length=36), nullable=True),
        sa.Column('session_id', sa.String(length=36), nullable=True),
        sa.Column('kind', sa.String(length=30), nullable=False),
        sa.Column('requested_start', sa.DateTime(timezone=True), nullable=True),
        sa.Column('duration_min', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('decided_by', sa.String(length=36), nullable=True),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_session_requests_client_id'), 'session_requests', ['client_id'], unique=False)
        op.create_index(op.f('ix_session_requests_trainer_id'), 'session_requests', ['trainer_id'], unique=False)
        op.create_index(op.f('ix_session_requests_status'), 'session_requests', ['status'], unique=False)

    if not inspector.has_table('notifications'):
        op.create_table('notifications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_notifications_user_id'), 'notifications', ['user_id'], unique=False)
        op.create_index(op.f('ix_notifications_created_at'), 'notifications', ['created_at'], unique=False)

    if not inspector.has_table('messages'):
        op.create_table('messages',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('from_id', sa.String(length=36), nullable=True),
        sa.Column('to_id', sa.String(length=36), nullable=True),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('channel', sa.String(length=30), nullable=True),
        sa.Column('reply_to_id', sa.String(length=36), nullable=True),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_messages_from_id'), 'messages', ['from_id'], unique=False)
        op.create_index(op.f('ix_messages_to_id'), 'messages', ['to_id'], unique=False)
        op.create_index(op.f('ix_messages_sent_at'), 'messages', ['sent_at'], unique=False)

    if not inspector.has_table('anthropometry'):
        op.create_table('anthropometry',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('measured_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('weight_kg', sa.Float(), nullable=True),
        sa.Column('body_fat_pct', sa.Float(), nullable=True),
        sa.Column('bmi', sa.Float(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(length=36), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_anthropometry_user_id'), 'anthropometry', ['user_id'], unique=False)
        op.create_index(op.f('ix_anthropometry_measured_at'), 'anthropometry', ['measured_at'], unique=False)

    if not inspector.has_table('client_wallets'):
        op.create_table('client_wallets',
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('balance', sa.Float(), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='EUR'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('user_id')
        )

    if not inspector.has_table('client_wallet_entries'):
        op.create_table('client_wallet_entries',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_client_wallet_entries_user_id'), 'client_wallet_entries', ['user_id'], unique=False)

    if not inspector.has_table('user_notes'):
        op.create_table('user_notes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('author_id', sa.String(length=36), nullable=True),
        sa.Column('body', sa.Text(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_user_notes_user_id'), 'user_notes', ['user_id'], unique=False)

    if not inspector.has_table('system_services'):
        op.create_table('system_services',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('state', sa.String(length=20), nullable=True),
        sa.Column('latency_ms', sa.Float(), nullable=True),
        sa.Column('uptime_percent', sa.Float(), nullable=True),
        sa.Column('incidents_30d', sa.Integer(), nullable=True),
        sa.Column('trend_label', sa.String(length=255), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
        )

    for table in ('system_monitors', 'system_resilience_practices'):
        if not inspector.has_table(table):
            op.create_table(table,
            sa.Column('id', sa.String(length=64), nullable=False),
            sa.Column('title', sa.String(length=255), nullable=False),
            sa.Column('detail', sa.Text(), nullable=True),
            sa.Column('status', sa.String(length=20), nullable=True),
            sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint('id')
            )

    if not inspector.has_table('audit_log'):
        op.create_table('audit_log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('kind', sa.String(length=50), nullable=False),
        sa.Column('actor_id', sa.String(length=36), nullable=True),
        sa.Column('target_type', sa.String(length=50), nullable=True),
        sa.Column('target_id', sa.String(length=64), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_audit_log_kind'), 'audit_log', ['kind'], unique=False)
        op.create_index(op.f('ix_audit_log_created_at'), 'audit_log', ['created_at'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    for table in (
        'audit_log',
        'system_resilience_practices',
        'system_monitors',
        'system_services',
        'user_notes',
        'client_wallet_entries',
        'client_wallets',
        'anthropometry',
        'messages',
        'notifications',
        'session_requests',
        'training_sessions',
        'training_plans',
        'trainer_clients',
        'users',
    ):
        if inspector.has_table(table):
            op.drop_table(table)

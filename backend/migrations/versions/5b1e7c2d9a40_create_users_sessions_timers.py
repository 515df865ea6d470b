"""create users, sessions, active_timers and old_timers

Revision ID: 5b1e7c2d9a40
Revises:
Create Date: 2026-10-18 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b1e7c2d9a40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'sessions',
        sa.Column('token', sa.String(length=64), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('created_at', sa.Float(), nullable=False),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])

    op.create_table(
        'active_timers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('start', sa.BigInteger(), nullable=False),
        sa.Column('progress', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('description', sa.String(length=255), nullable=False, server_default=''),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_active_timers_user_id', 'active_timers', ['user_id'])

    # ids are carried over from active_timers, never generated here
    op.create_table(
        'old_timers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('start', sa.BigInteger(), nullable=False),
        sa.Column('end', sa.BigInteger(), nullable=False),
        sa.Column('duration', sa.BigInteger(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False, server_default=''),
    )
    op.create_index('ix_old_timers_user_id', 'old_timers', ['user_id'])


def downgrade():
    op.drop_index('ix_old_timers_user_id', table_name='old_timers')
    op.drop_table('old_timers')
    op.drop_index('ix_active_timers_user_id', table_name='active_timers')
    op.drop_table('active_timers')
    op.drop_index('ix_sessions_user_id', table_name='sessions')
    op.drop_table('sessions')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')

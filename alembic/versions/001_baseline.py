"""baseline schema - users, logs, weekly briefs

Revision ID: 001_baseline
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = '001_baseline'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Users table
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=True),
        sa.Column('stripe_customer_id', sa.String(255), nullable=True),
        sa.Column('stripe_subscription_id', sa.String(255), nullable=True),
        sa.Column('subscription_plan', sa.String(20), nullable=False, server_default='free'),
        sa.Column('subscription_status', sa.String(20), nullable=False, server_default='none'),
        sa.Column('subscription_end_date', sa.DateTime(), nullable=True),
        sa.Column('settings', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_stripe_customer_id', 'users', ['stripe_customer_id'])

    # Logs table
    op.create_table('logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('tone', sa.String(20), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_logs_user_id_created_at', 'logs', ['user_id', 'created_at'])
    op.create_index('ix_logs_user_id_type', 'logs', ['user_id', 'type'])

    # Weekly briefs table
    op.create_table('weekly_briefs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('week_start', sa.DateTime(), nullable=False),
        sa.Column('week_end', sa.DateTime(), nullable=False),
        sa.Column('summary', sa.JSON(), nullable=True),
        sa.Column('encrypted', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('pdf_path', sa.String(500), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='generating'),
        sa.Column('logs_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('generated_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'week_start', 'week_end', name='uq_weekly_briefs_user_window')
    )
    op.create_index('ix_weekly_briefs_user_id_week_end', 'weekly_briefs', ['user_id', 'week_end'])


def downgrade():
    op.drop_index('ix_weekly_briefs_user_id_week_end', table_name='weekly_briefs')
    op.drop_table('weekly_briefs')
    op.drop_index('ix_logs_user_id_type', table_name='logs')
    op.drop_index('ix_logs_user_id_created_at', table_name='logs')
    op.drop_table('logs')
    op.drop_index('ix_users_stripe_customer_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

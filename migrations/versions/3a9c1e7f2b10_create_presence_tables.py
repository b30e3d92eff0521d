"""create visitor, presence_session and analytics_stats tables

Revision ID: 3a9c1e7f2b10
Revises:
Create Date: 2026-10-18 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a9c1e7f2b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'visitor' not in existing_tables:
        op.create_table(
            'visitor',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('fingerprint', sa.String(length=128), nullable=False),
            sa.Column('visit_count', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('last_visit', sa.DateTime(), nullable=True),
            sa.Column('socket_id', sa.String(length=64), nullable=True),
        )
        op.create_index('ix_visitor_fingerprint', 'visitor', ['fingerprint'], unique=True)

    if 'presence_session' not in existing_tables:
        op.create_table(
            'presence_session',
            sa.Column('socket_id', sa.String(length=64), primary_key=True),
            sa.Column('fingerprint', sa.String(length=128), nullable=False),
            sa.Column('last_seen', sa.DateTime(), nullable=True),
        )
        op.create_index('ix_presence_session_last_seen', 'presence_session', ['last_seen'])

    if 'analytics_stats' not in existing_tables:
        op.create_table(
            'analytics_stats',
            sa.Column('id', sa.String(length=16), primary_key=True),
            sa.Column('unique_visitors', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_visits', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('peak_concurrent', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('last_updated', sa.DateTime(), nullable=True),
        )


def downgrade():
    op.drop_table('analytics_stats')
    op.drop_index('ix_presence_session_last_seen', table_name='presence_session')
    op.drop_table('presence_session')
    op.drop_index('ix_visitor_fingerprint', table_name='visitor')
    op.drop_table('visitor')

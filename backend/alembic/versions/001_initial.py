"""Initial database schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Boot catalog
    op.create_table(
        'boots',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('year', sa.String(10), nullable=False),
        sa.Column('gender', sa.String(10), nullable=False),
        sa.Column('brand', sa.String(100), nullable=False),
        sa.Column('model', sa.String(200), nullable=False),
        sa.Column('boot_type', sa.JSON),
        sa.Column('flex', sa.Integer, nullable=False),
        sa.Column('last_width_mm', sa.Numeric(5, 1), nullable=False),
        sa.Column('toe_box_shape', sa.String(20)),
        sa.Column('instep_height', sa.String(20)),
        sa.Column('ankle_volume', sa.String(20)),
        sa.Column('calf_volume', sa.String(20)),
        sa.Column('walk_mode', sa.Boolean, server_default=sa.false()),
        sa.Column('rear_entry', sa.Boolean, server_default=sa.false()),
        sa.Column('calf_adjustment', sa.Boolean, server_default=sa.false()),
        sa.Column('affiliate_url', sa.String(1000)),
        sa.Column('links', postgresql.JSONB),
        sa.Column('image_url', sa.String(500)),
        sa.Column('tags', postgresql.ARRAY(sa.Text)),
        sa.Column('created_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.UniqueConstraint('brand', 'model', 'year', 'gender', name='uq_boot_identity'),
    )

    # Quiz sessions
    op.create_table(
        'quiz_sessions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', sa.String(128)),
        sa.Column('answers', postgresql.JSONB, nullable=False, server_default='{}'),
        sa.Column('recommended_boots', postgresql.JSONB),
        sa.Column('recommended_mondo', sa.String(20)),
        sa.Column('started_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.Column('completed_at', sa.DateTime),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('NOW()')),
    )

    # AI fitting breakdowns, one per user and quiz
    op.create_table(
        'fitting_breakdowns',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('quiz_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('quiz_sessions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('language', sa.String(10), server_default='en-GB'),
        sa.Column('model_provider', sa.String(50), nullable=False),
        sa.Column('model_name', sa.String(100), nullable=False),
        sa.Column('word_count', sa.Integer, server_default='0'),
        sa.Column('sections', postgresql.JSONB, nullable=False),
        sa.Column('generated_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.UniqueConstraint('user_id', 'quiz_id', name='uq_breakdown_user_quiz'),
    )

    # Affiliate click tracking
    op.create_table(
        'affiliate_clicks',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('user_id', sa.String(128)),
        sa.Column('session_id', sa.String(64)),
        sa.Column('country', sa.String(8)),
        sa.Column('user_agent', sa.Text),
        sa.Column('boot_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('brand', sa.String(100), nullable=False),
        sa.Column('model', sa.String(200), nullable=False),
        sa.Column('vendor', sa.String(100)),
        sa.Column('region', sa.String(8)),
        sa.Column('affiliate_url', sa.String(1000), nullable=False),
        sa.Column('timestamp', sa.DateTime, server_default=sa.text('NOW()')),
    )

    # Indexes
    op.create_index('ix_quiz_sessions_user_id', 'quiz_sessions', ['user_id'])
    op.create_index('idx_quiz_sessions_completed', 'quiz_sessions', ['completed_at'], postgresql_where=sa.text('completed_at IS NOT NULL'))
    op.create_index('idx_boots_gender_flex', 'boots', ['gender', 'flex'])
    op.create_index('ix_affiliate_clicks_boot_id', 'affiliate_clicks', ['boot_id'])


def downgrade() -> None:
    # Drop indexes
    op.drop_index('ix_affiliate_clicks_boot_id')
    op.drop_index('idx_boots_gender_flex')
    op.drop_index('idx_quiz_sessions_completed')
    op.drop_index('ix_quiz_sessions_user_id')

    # Drop tables in reverse order
    op.drop_table('affiliate_clicks')
    op.drop_table('fitting_breakdowns')
    op.drop_table('quiz_sessions')
    op.drop_table('boots')

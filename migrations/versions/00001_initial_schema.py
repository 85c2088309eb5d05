"""Initial schema - analysis jobs and puzzles.

Revision ID: 00001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '00001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # analysis_jobs
    op.create_table(
        'analysis_jobs',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('owner_id', sa.String(64), nullable=False),
        sa.Column('batch_id', sa.String(32), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('pgn', sa.Text(), nullable=False),
        sa.Column('player_name', sa.String(255), nullable=False),
        sa.Column('player_color', sa.String(10), nullable=True),
        sa.Column('game_metadata', sa.Text(), nullable=False, server_default='{}'),
        sa.Column('result', sa.Text(), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_analysis_jobs_owner_status', 'analysis_jobs', ['owner_id', 'status'])
    op.create_index('idx_analysis_jobs_batch', 'analysis_jobs', ['batch_id'])

    # puzzles
    op.create_table(
        'puzzles',
        sa.Column('id', sa.String(32), nullable=False),
        sa.Column('owner_id', sa.String(64), nullable=False),
        sa.Column('source_job_id', sa.String(32), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('fen', sa.String(120), nullable=False),
        sa.Column('solution', sa.Text(), nullable=False),
        sa.Column('hint', sa.Text(), nullable=True),
        sa.Column('difficulty', sa.String(10), nullable=False),
        sa.Column('theme', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_puzzles_owner', 'puzzles', ['owner_id'])
    op.create_index('idx_puzzles_source_job', 'puzzles', ['source_job_id'])


def downgrade() -> None:
    op.drop_index('idx_puzzles_source_job', table_name='puzzles')
    op.drop_index('idx_puzzles_owner', table_name='puzzles')
    op.drop_table('puzzles')
    op.drop_index('idx_analysis_jobs_batch', table_name='analysis_jobs')
    op.drop_index('idx_analysis_jobs_owner_status', table_name='analysis_jobs')
    op.drop_table('analysis_jobs')

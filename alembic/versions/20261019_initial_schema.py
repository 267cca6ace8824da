"""initial_schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create match cache, rank snapshot and tracking tables."""
    op.create_table(
        'match_cache',
        sa.Column('match_id', sa.String(length=50), nullable=False),
        sa.Column('sort_key', sa.String(length=10), nullable=False),
        sa.Column('game_kind', sa.String(length=10), nullable=False),
        sa.Column('game_creation', sa.BigInteger(), nullable=False),
        sa.Column('queue_id', sa.Integer(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('cached_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('match_id', 'sort_key')
    )

    op.create_table(
        'rank_snapshots',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('player_id', sa.String(length=78), nullable=False),
        sa.Column('game_kind', sa.String(length=10), nullable=False),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
        sa.Column('tier', sa.String(length=20), nullable=False),
        sa.Column('division', sa.String(length=4), nullable=True),
        sa.Column('league_points', sa.Integer(), nullable=False),
        sa.Column('wins', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('losses', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('player_id', 'game_kind', 'timestamp', name='uq_rank_snapshot')
    )
    op.create_index(
        'ix_rank_snapshot_player_kind_time',
        'rank_snapshots',
        ['player_id', 'game_kind', 'timestamp'],
        unique=False,
    )

    op.create_table(
        'tracked_players',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('player_id', sa.String(length=78), nullable=False),
        sa.Column('game_kind', sa.String(length=10), nullable=False),
        sa.Column('riot_id', sa.String(length=120), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('player_id', 'game_kind', name='uq_tracked_player')
    )
    op.create_index(op.f('ix_tracked_players_player_id'), 'tracked_players', ['player_id'], unique=False)


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index(op.f('ix_tracked_players_player_id'), table_name='tracked_players')
    op.drop_table('tracked_players')
    op.drop_index('ix_rank_snapshot_player_kind_time', table_name='rank_snapshots')
    op.drop_table('rank_snapshots')
    op.drop_table('match_cache')

"""initial schema: players, prize caps, grant ledger, admin credential, system config

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-11-20 10:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _json_type(dialect: str):
    if dialect == 'postgresql':
        from sqlalchemy.dialects import postgresql

        return postgresql.JSONB(astext_type=sa.Text())
    return sa.JSON()


def upgrade() -> None:
    """Create all game tables."""

    bind = op.get_bind()
    dialect = bind.dialect.name if bind else 'postgresql'

    now_default = sa.func.now()
    if dialect == 'postgresql':
        now_default = sa.text("timezone('utc', now())")

    op.create_table(
        'players',
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('area', sa.String(length=20), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('rolls_used', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('rolls_granted', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reward', sa.Integer(), nullable=True),
        sa.Column('high_tier', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now_default),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=now_default),
        sa.PrimaryKeyConstraint('email', 'area'),
        sa.CheckConstraint('position >= 0', name='ck_players_position_non_negative'),
        sa.CheckConstraint('position <= 30', name='ck_players_position_max'),
        sa.CheckConstraint('rolls_used >= 0', name='ck_players_rolls_used_non_negative'),
        sa.CheckConstraint('rolls_granted >= 0', name='ck_players_rolls_granted_non_negative'),
    )
    op.create_index('ix_players_area_high_tier', 'players', ['area', 'high_tier'], unique=False)

    op.create_table(
        'area_prize_configs',
        sa.Column('area', sa.String(length=20), nullable=False),
        sa.Column('max_high_tier_winners', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=now_default),
        sa.PrimaryKeyConstraint('area'),
        sa.CheckConstraint('max_high_tier_winners >= 0', name='ck_area_prize_configs_max_non_negative'),
    )

    op.create_table(
        'grant_records',
        sa.Column('grant_id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('area', sa.String(length=20), nullable=False),
        sa.Column('affected_emails', _json_type(dialect), nullable=False),
        sa.Column('rolls_granted', sa.Integer(), nullable=False),
        sa.Column('applied_deltas', _json_type(dialect), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=now_default),
        sa.PrimaryKeyConstraint('grant_id'),
        sa.UniqueConstraint('area', name='uq_grant_records_area'),
    )

    op.create_table(
        'admin_credentials',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=80), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=now_default),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'system_config',
        sa.Column('key', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('value_type', sa.String(length=20), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=50), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=now_default),
        sa.Column('updated_by', sa.String(length=100), nullable=True),
        sa.PrimaryKeyConstraint('key'),
    )


def downgrade() -> None:
    """Drop all game tables."""

    op.drop_table('system_config')
    op.drop_table('admin_credentials')
    op.drop_table('grant_records')
    op.drop_table('area_prize_configs')
    op.drop_index('ix_players_area_high_tier', table_name='players')
    op.drop_table('players')

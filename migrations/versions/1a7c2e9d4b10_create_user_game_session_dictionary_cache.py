"""create user, game_session and dictionary_cache tables

Revision ID: 1a7c2e9d4b10
Revises:
Create Date: 2026-02-09 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a7c2e9d4b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=40), nullable=False),
            sa.Column('name', sa.String(length=80), nullable=True),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('gems', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('free_swaps_left', sa.Integer(), nullable=False, server_default='3'),
            sa.Column('last_free_reset_at', sa.Date(), nullable=True),
            sa.Column('best_score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_gems', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_games', sa.Integer(), nullable=False, server_default='0'),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'game_session' not in existing_tables:
        op.create_table(
            'game_session',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
            sa.Column('letters', sa.String(length=32), nullable=False),
            sa.Column('words', sa.Text(), nullable=True),
            sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('gems_earned', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('swaps_used', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('hints_revealed', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('duration_seconds', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('completed_at', sa.DateTime(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_game_session_user_id', 'game_session', ['user_id'])

    if 'dictionary_cache' not in existing_tables:
        op.create_table(
            'dictionary_cache',
            sa.Column('word', sa.String(length=64), primary_key=True),
            sa.Column('is_valid', sa.Boolean(), nullable=False),
            sa.Column('expires_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_dictionary_cache_expires_at', 'dictionary_cache', ['expires_at'])


def downgrade():
    op.drop_index('ix_dictionary_cache_expires_at', table_name='dictionary_cache')
    op.drop_table('dictionary_cache')
    op.drop_index('ix_game_session_user_id', table_name='game_session')
    op.drop_table('game_session')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')

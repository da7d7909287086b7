"""create game_result and scoring_session tables

Revision ID: 3c7a9e1d2b40
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c7a9e1d2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'game_result' not in existing_tables:
        op.create_table(
            'game_result',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('num_players', sa.Integer(), nullable=False),
            sa.Column('include_oceania', sa.Boolean(), nullable=False),
            sa.Column('winner_name', sa.String(length=64), nullable=False),
            sa.Column('winner_score', sa.Integer(), nullable=False),
            sa.Column('players_json', sa.Text(), nullable=False),
            sa.Column('nectar_json', sa.Text(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_game_result_created_at', 'game_result', ['created_at'], unique=False)
        op.create_index('ix_game_result_winner_name', 'game_result', ['winner_name'], unique=False)

    if 'scoring_session' not in existing_tables:
        op.create_table(
            'scoring_session',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('session_code', sa.String(length=4), nullable=True),
            sa.Column('state_json', sa.Text(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_scoring_session_session_code', 'scoring_session', ['session_code'], unique=True)


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'scoring_session' in existing_tables:
        op.drop_index('ix_scoring_session_session_code', table_name='scoring_session')
        op.drop_table('scoring_session')
    if 'game_result' in existing_tables:
        op.drop_index('ix_game_result_winner_name', table_name='game_result')
        op.drop_index('ix_game_result_created_at', table_name='game_result')
        op.drop_table('game_result')

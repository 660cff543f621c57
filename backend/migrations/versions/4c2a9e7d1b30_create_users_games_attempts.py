"""create user, game_session and problem_attempt tables

Revision ID: 4c2a9e7d1b30
Revises:
Create Date: 2026-10-17 09:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e7d1b30'
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
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'game_session' not in existing_tables:
        op.create_table(
            'game_session',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('correct', sa.Integer(), nullable=False),
            sa.Column('wrong', sa.Integer(), nullable=False),
            sa.Column('total_problems', sa.Integer(), nullable=False),
            sa.Column('operations', sa.Text(), nullable=False),
            sa.Column('played_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_game_session_user_id', 'game_session', ['user_id'])
        op.create_index('ix_game_session_played_at', 'game_session', ['played_at'])

    if 'problem_attempt' not in existing_tables:
        op.create_table(
            'problem_attempt',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('game_session.id'), nullable=False),
            sa.Column('operation', sa.String(length=8), nullable=False),
            sa.Column('num1', sa.Integer(), nullable=False),
            sa.Column('num2', sa.Integer(), nullable=False),
            sa.Column('correct_answer', sa.Integer(), nullable=False),
            sa.Column('user_answer', sa.Integer(), nullable=True),
            sa.Column('is_correct', sa.Boolean(), nullable=False),
        )
        op.create_index('ix_problem_attempt_game_id', 'problem_attempt', ['game_id'])


def downgrade():
    op.drop_index('ix_problem_attempt_game_id', table_name='problem_attempt')
    op.drop_table('problem_attempt')
    op.drop_index('ix_game_session_played_at', table_name='game_session')
    op.drop_index('ix_game_session_user_id', table_name='game_session')
    op.drop_table('game_session')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')

"""create player and score_entry tables

Revision ID: 1a7c3e9d2b40
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a7c3e9d2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'player',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('player') as batch_op:
        batch_op.create_index(batch_op.f('ix_player_name'), ['name'], unique=True)

    op.create_table(
        'score_entry',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('player_id', sa.Integer(), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('action_label', sa.String(length=64), nullable=True),
        sa.Column('input_type', sa.String(length=16), nullable=False, server_default='shortcut'),
        sa.ForeignKeyConstraint(['player_id'], ['player.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('score_entry') as batch_op:
        batch_op.create_index(batch_op.f('ix_score_entry_player_id'), ['player_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_score_entry_timestamp'), ['timestamp'], unique=False)


def downgrade():
    with op.batch_alter_table('score_entry') as batch_op:
        batch_op.drop_index(batch_op.f('ix_score_entry_timestamp'))
        batch_op.drop_index(batch_op.f('ix_score_entry_player_id'))
    op.drop_table('score_entry')
    with op.batch_alter_table('player') as batch_op:
        batch_op.drop_index(batch_op.f('ix_player_name'))
    op.drop_table('player')

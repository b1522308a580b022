"""Create users, challenges, participants and exercise logs

Revision ID: 3b1f0c9a2d47
Revises:
Create Date: 2026-09-28 10:12:03.418211

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b1f0c9a2d47'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('goal_exercises', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("role IN ('participant','admin')"),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_email'), ['email'], unique=True)

    op.create_table(
        'challenges',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=150), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('goal_count', sa.Integer(), nullable=False),
        sa.Column('group_goal', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('prize', sa.String(length=255), nullable=True),
        sa.Column('penalty', sa.String(length=255), nullable=True),
        sa.Column('invite_code', sa.String(length=32), nullable=True),
        sa.Column('creator_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("status IN ('active','closed')"),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invite_code'),
    )
    with op.batch_alter_table('challenges', schema=None) as batch_op:
        batch_op.create_index('idx_challenges_end_date', ['end_date'], unique=False)
        batch_op.create_index(batch_op.f('ix_challenges_creator_id'), ['creator_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_challenges_status'), ['status'], unique=False)

    op.create_table(
        'challenge_participants',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('challenge_id', sa.Integer(), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['challenge_id'], ['challenges.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'challenge_id', name='uq_challenge_participant'),
    )
    with op.batch_alter_table('challenge_participants', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_challenge_participants_challenge_id'), ['challenge_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_challenge_participants_user_id'), ['user_id'], unique=False)

    op.create_table(
        'exercise_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('challenge_id', sa.Integer(), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False),
        sa.Column('activity', sa.String(length=150), nullable=True),
        sa.Column('logged_on', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['challenge_id'], ['challenges.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('exercise_logs', schema=None) as batch_op:
        batch_op.create_index('idx_exercise_logs_user_challenge', ['user_id', 'challenge_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_exercise_logs_challenge_id'), ['challenge_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_exercise_logs_created_at'), ['created_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_exercise_logs_user_id'), ['user_id'], unique=False)


def downgrade():
    op.drop_table('exercise_logs')
    op.drop_table('challenge_participants')
    op.drop_table('challenges')
    op.drop_table('users')

"""create game session schema

Revision ID: 5c2e9a7d1b40
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2e9a7d1b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=True),
        sa.Column('is_guest', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('guest_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('level', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table(
        'category',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=64), nullable=False, unique=True),
    )

    op.create_table(
        'question',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('category.id'), nullable=True),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('option_a', sa.String(length=255), nullable=False),
        sa.Column('option_b', sa.String(length=255), nullable=False),
        sa.Column('option_c', sa.String(length=255), nullable=False),
        sa.Column('option_d', sa.String(length=255), nullable=False),
        sa.Column('correct_answer', sa.String(length=1), nullable=False),
        sa.Column('difficulty', sa.String(length=16), nullable=False),
    )
    op.create_index('ix_question_category_id', 'question', ['category_id'])
    op.create_index('ix_question_difficulty', 'question', ['difficulty'])

    op.create_table(
        'game_room',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('room_code', sa.String(length=6), nullable=False),
        sa.Column('host_user_id', sa.String(length=36), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('current_stage', sa.Integer(), nullable=False),
        sa.Column('max_stages', sa.Integer(), nullable=False),
        sa.Column('voice_channel', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_game_room_room_code', 'game_room', ['room_code'], unique=True)

    op.create_table(
        'room_participant',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('room_id', sa.String(length=36), sa.ForeignKey('game_room.id'), nullable=False),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('lives_remaining', sa.Integer(), nullable=False),
        sa.Column('total_score', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('room_id', 'user_id', name='uq_participant_room_user'),
    )
    op.create_index('ix_room_participant_room_id', 'room_participant', ['room_id'])

    op.create_table(
        'stage_schedule',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('room_id', sa.String(length=36), sa.ForeignKey('game_room.id'), nullable=False),
        sa.Column('stage_number', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('turn_order', sa.Text(), nullable=False),
        sa.Column('cursor', sa.Integer(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.UniqueConstraint('room_id', 'stage_number', name='uq_schedule_room_stage'),
    )
    op.create_index('ix_stage_schedule_room_id', 'stage_schedule', ['room_id'])

    op.create_table(
        'turn',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('schedule_id', sa.Integer(), sa.ForeignKey('stage_schedule.id'), nullable=False),
        sa.Column('participant_id', sa.Integer(), sa.ForeignKey('room_participant.id'), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), sa.ForeignKey('question.id'), nullable=True),
        sa.Column('deadline', sa.Float(), nullable=True),
        sa.Column('answered', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('outcome', sa.String(length=16), nullable=True),
        sa.Column('selected_answer', sa.String(length=1), nullable=True),
        sa.Column('time_taken', sa.Float(), nullable=True),
        sa.Column('voice_transcript', sa.Text(), nullable=True),
        sa.Column('points_earned', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('answered_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_turn_schedule_id', 'turn', ['schedule_id'])

    op.create_table(
        'room_used_question',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('room_id', sa.String(length=36), sa.ForeignKey('game_room.id'), nullable=False),
        sa.Column('question_id', sa.Integer(), sa.ForeignKey('question.id'), nullable=False),
        sa.Column('stage_number', sa.Integer(), nullable=False),
        sa.UniqueConstraint('room_id', 'question_id', 'stage_number', name='uq_used_question'),
    )
    op.create_index('ix_room_used_question_room_id', 'room_used_question', ['room_id'])


def downgrade():
    op.drop_table('room_used_question')
    op.drop_table('turn')
    op.drop_table('stage_schedule')
    op.drop_table('room_participant')
    op.drop_table('game_room')
    op.drop_table('question')
    op.drop_table('category')
    op.drop_table('user')

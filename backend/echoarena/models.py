from echoarena import db
from flask_login import UserMixin
from datetime import datetime, timezone
import json
import uuid


def _new_uuid():
    return str(uuid.uuid4())


def _utcnow():
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.String(36), primary_key=True, default=_new_uuid)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=True)  # null for guests
    is_guest = db.Column(db.Boolean, default=False, nullable=False)
    guest_expires_at = db.Column(db.DateTime(timezone=True), nullable=True)
    level = db.Column(db.Integer, default=1, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'is_guest': self.is_guest,
            'level': self.level,
        }


class Category(db.Model):
    __tablename__ = 'category'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False)

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


class Question(db.Model):
    __tablename__ = 'question'
    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey('category.id'), nullable=True, index=True)
    question_text = db.Column(db.Text, nullable=False)
    option_a = db.Column(db.String(255), nullable=False)
    option_b = db.Column(db.String(255), nullable=False)
    option_c = db.Column(db.String(255), nullable=False)
    option_d = db.Column(db.String(255), nullable=False)
    correct_answer = db.Column(db.String(1), nullable=False)  # A, B, C or D
    difficulty = db.Column(db.String(16), nullable=False, default='medium', index=True)
    category = db.relationship('Category')

    def to_dict(self, include_answer=False):
        """Serialise the question; the correct answer is only included on request."""
        data = {
            'id': self.id,
            'category_id': self.category_id,
            'question_text': self.question_text,
            'option_a': self.option_a,
            'option_b': self.option_b,
            'option_c': self.option_c,
            'option_d': self.option_d,
            'difficulty': self.difficulty,
        }
        if include_answer:
            data['correct_answer'] = self.correct_answer
        return data


class Room(db.Model):
    __tablename__ = 'game_room'
    id = db.Column(db.String(36), primary_key=True, default=_new_uuid)
    room_code = db.Column(db.String(6), unique=True, nullable=False, index=True)
    host_user_id = db.Column(db.String(36), db.ForeignKey('user.id'), nullable=False)
    status = db.Column(db.String(16), default='waiting', nullable=False)  # waiting, playing, finished
    current_stage = db.Column(db.Integer, default=0, nullable=False)
    max_stages = db.Column(db.Integer, nullable=False)
    voice_channel = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)

    participants = db.relationship(
        'Participant', back_populates='room', cascade='all, delete-orphan',
        order_by='Participant.id',
    )
    schedules = db.relationship('StageSchedule', back_populates='room', cascade='all, delete-orphan')
    used_questions = db.relationship('UsedQuestion', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'room_code': self.room_code,
            'host_user_id': self.host_user_id,
            'status': self.status,
            'current_stage': self.current_stage,
            'max_stages': self.max_stages,
            'voice_channel': self.voice_channel,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def summary(self):
        return {'id': self.id, 'code': self.room_code, 'hostId': self.host_user_id}


class Participant(db.Model):
    __tablename__ = 'room_participant'
    __table_args__ = (db.UniqueConstraint('room_id', 'user_id', name='uq_participant_room_user'),)
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.String(36), db.ForeignKey('game_room.id'), nullable=False, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey('user.id'), nullable=False)
    lives_remaining = db.Column(db.Integer, default=3, nullable=False)
    total_score = db.Column(db.Integer, default=0, nullable=False)
    status = db.Column(db.String(16), default='active', nullable=False)  # active, eliminated, left
    joined_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)

    room = db.relationship('Room', back_populates='participants')
    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'room_id': self.room_id,
            'user_id': self.user_id,
            'username': self.user.username if self.user else None,
            'lives_remaining': self.lives_remaining,
            'total_score': self.total_score,
            'status': self.status,
        }


class StageSchedule(db.Model):
    """Turn order and cursor for one stage of one room."""
    __tablename__ = 'stage_schedule'
    __table_args__ = (db.UniqueConstraint('room_id', 'stage_number', name='uq_schedule_room_stage'),)
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.String(36), db.ForeignKey('game_room.id'), nullable=False, index=True)
    stage_number = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), default='active', nullable=False)  # active, complete
    turn_order = db.Column(db.Text, nullable=False)  # JSON-encoded list of participant ids
    cursor = db.Column(db.Integer, nullable=True)
    version_id = db.Column(db.Integer, nullable=False)

    room = db.relationship('Room', back_populates='schedules')
    turns = db.relationship(
        'Turn', back_populates='schedule', cascade='all, delete-orphan',
        order_by='Turn.sequence',
    )

    __mapper_args__ = {'version_id_col': version_id}

    @property
    def order(self):
        return json.loads(self.turn_order) if self.turn_order else []

    @property
    def current_turn(self):
        if self.status != 'active':
            return None
        return (
            Turn.query.filter_by(schedule_id=self.id, answered=False)
            .order_by(Turn.sequence.desc())
            .first()
        )


class Turn(db.Model):
    __tablename__ = 'turn'
    id = db.Column(db.Integer, primary_key=True)
    schedule_id = db.Column(db.Integer, db.ForeignKey('stage_schedule.id'), nullable=False, index=True)
    participant_id = db.Column(db.Integer, db.ForeignKey('room_participant.id'), nullable=False)
    sequence = db.Column(db.Integer, nullable=False)
    question_id = db.Column(db.Integer, db.ForeignKey('question.id'), nullable=True)
    deadline = db.Column(db.Float, nullable=True)  # epoch seconds
    answered = db.Column(db.Boolean, default=False, nullable=False)
    outcome = db.Column(db.String(16), nullable=True)  # correct, wrong, missed, skipped
    selected_answer = db.Column(db.String(1), nullable=True)
    time_taken = db.Column(db.Float, nullable=True)
    voice_transcript = db.Column(db.Text, nullable=True)
    points_earned = db.Column(db.Integer, default=0, nullable=False)
    answered_at = db.Column(db.DateTime(timezone=True), nullable=True)

    schedule = db.relationship('StageSchedule', back_populates='turns')
    participant = db.relationship('Participant')
    question = db.relationship('Question')

    def to_dict(self):
        participant = self.participant
        return {
            'id': self.id,
            'stage_number': self.schedule.stage_number if self.schedule else None,
            'sequence': self.sequence,
            'participant_id': self.participant_id,
            'user_id': participant.user_id if participant else None,
            'username': participant.user.username if participant and participant.user else None,
            'question_id': self.question_id,
            'question': self.question.to_dict() if self.question and not self.answered else None,
            'deadline': self.deadline,
            'answered': self.answered,
            'outcome': self.outcome,
        }


class UsedQuestion(db.Model):
    __tablename__ = 'room_used_question'
    __table_args__ = (
        db.UniqueConstraint('room_id', 'question_id', 'stage_number', name='uq_used_question'),
    )
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.String(36), db.ForeignKey('game_room.id'), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey('question.id'), nullable=False)
    stage_number = db.Column(db.Integer, nullable=False)

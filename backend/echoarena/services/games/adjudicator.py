"""Answer adjudication: validate a submission, score it, move the turn on.

A turn is claimed with a conditional update on ``answered = false`` so that
of several racing submissions exactly one is applied; the rest fail with
``TurnAlreadyAnswered`` before touching score or lives.
"""
import time
from datetime import datetime, timezone
from typing import Optional

from flask import current_app
from sqlalchemy.orm.exc import StaleDataError

from echoarena import db
from echoarena.models import Participant, Question, Room, StageSchedule, Turn
from . import events
from .errors import (
    InvalidRoomState,
    InvalidSubmission,
    TurnAlreadyAnswered,
    Unauthorized,
    UnknownQuestion,
)
from .rooms import get_room
from .scoring import points_for_correct_answer
from .turns import advance, get_schedule, is_stage_complete  # noqa: F401

ANSWER_LETTERS = ('A', 'B', 'C', 'D')


def _as_int(value, field: str) -> int:
    if isinstance(value, bool):
        raise InvalidSubmission(f'{field} must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidSubmission(f'{field} must be an integer')


def _as_seconds(value) -> Optional[float]:
    if value is None or value == '':
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise InvalidSubmission('timeTaken must be a number')
    if seconds < 0:
        raise InvalidSubmission('timeTaken cannot be negative')
    return seconds


def _claim_turn(turn: Turn, **fields) -> None:
    fields['answered'] = True
    fields['answered_at'] = datetime.now(timezone.utc)
    claimed = Turn.query.filter_by(id=turn.id, answered=False).update(fields)
    if claimed != 1:
        db.session.rollback()
        raise TurnAlreadyAnswered()


def _settle(room: Room, schedule: StageSchedule, participant: Participant, turn: Turn,
            question: Optional[Question], is_correct: bool, time_taken: Optional[float],
            costs_life: bool):
    """Apply the consequences of a closed turn, advance and commit."""
    points = 0
    was_active = participant.status == 'active'
    if is_correct:
        points = points_for_correct_answer(time_taken)
        participant.total_score += points
        turn.points_earned = points
    elif costs_life:
        participant.lives_remaining = max(0, participant.lives_remaining - 1)
        if participant.lives_remaining == 0:
            participant.status = 'eliminated'
    newly_eliminated = was_active and participant.status == 'eliminated'

    try:
        next_turn = advance(schedule)
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise TurnAlreadyAnswered()

    stage_number = schedule.stage_number
    stage_complete = next_turn is None
    current_app.logger.info(
        f"[answer] room={room.id} stage={stage_number} participant={participant.id} "
        f"outcome={turn.outcome} points={points} lives={participant.lives_remaining}"
    )
    result = {
        'turn_id': turn.id,
        'outcome': turn.outcome,
        'is_correct': is_correct,
        'correct_answer': question.correct_answer if question else None,
        'points_earned': points,
        'lives_remaining': participant.lives_remaining,
        'total_score': participant.total_score,
        'eliminated': participant.status == 'eliminated',
    }

    events.emit_game_event(
        room.id, events.ANSWER_SUBMITTED,
        userId=participant.user_id, stageNumber=stage_number,
        isCorrect=is_correct, outcome=turn.outcome,
    )
    if newly_eliminated:
        current_app.logger.info(f"[eliminated] room={room.id} participant={participant.id}")
        events.emit_game_event(
            room.id, events.PLAYER_ELIMINATED,
            userId=participant.user_id,
            username=participant.user.username if participant.user else None,
        )
    events.emit_game_event(
        room.id, events.TURN_CHANGED,
        turn=next_turn.to_dict() if next_turn else None,
        stageNumber=stage_number, stageComplete=stage_complete,
    )
    return result, stage_complete


def submit_answer(room_id: str, stage_number, user_id, question_id, selected_answer,
                  time_taken=None, voice_transcript=None):
    """Adjudicate an answer for the current turn.

    Returns ``(result, stage_complete)``.
    """
    if not user_id or not stage_number or not question_id or not selected_answer:
        raise InvalidSubmission('Missing required fields')
    stage = _as_int(stage_number, 'stageNumber')
    qid = _as_int(question_id, 'questionId')
    letter = str(selected_answer).strip().upper()
    if letter not in ANSWER_LETTERS:
        raise InvalidSubmission('selectedAnswer must be one of A, B, C, D')
    elapsed = _as_seconds(time_taken)

    room = get_room(room_id)
    if room.status != 'playing' or room.current_stage != stage:
        raise InvalidSubmission('Stage is not in play')
    schedule = get_schedule(room.id, stage, lock=True)
    participant = Participant.query.filter_by(room_id=room.id, user_id=str(user_id)).first()
    if not schedule or not participant:
        raise InvalidSubmission('Not a participant of this stage')

    turn = schedule.current_turn
    if turn is None or turn.participant_id != participant.id:
        already = Turn.query.filter_by(
            schedule_id=schedule.id, participant_id=participant.id, question_id=qid, answered=True,
        ).first()
        if already:
            raise TurnAlreadyAnswered()
        raise InvalidSubmission('It is not your turn')

    if turn.question_id is None or turn.question_id != qid:
        raise UnknownQuestion()
    question = db.session.get(Question, qid)
    if question is None:
        raise UnknownQuestion()

    is_correct = letter == question.correct_answer.upper()
    _claim_turn(
        turn,
        outcome='correct' if is_correct else 'wrong',
        selected_answer=letter,
        time_taken=elapsed,
        voice_transcript=voice_transcript,
    )
    return _settle(room, schedule, participant, turn, question, is_correct, elapsed, costs_life=True)


def expire_turn(room_id: str, stage_number=None, turn_id=None, user_id=None):
    """Close the current turn as missed once its deadline has passed.

    A miss is adjudicated like a wrong answer; whether it costs a life follows
    ``MISSED_TURN_COSTS_LIFE``. A turn without a loaded question has no
    deadline and cannot be missed.
    """
    room = get_room(room_id)
    if room.status != 'playing':
        raise InvalidRoomState('Game is not in progress')
    stage = room.current_stage if stage_number is None else _as_int(stage_number, 'stageNumber')
    if stage != room.current_stage:
        raise InvalidSubmission('Stage is not in play')

    schedule = get_schedule(room.id, stage, lock=True)
    turn = schedule.current_turn if schedule else None
    if turn is None or (turn_id is not None and turn.id != _as_int(turn_id, 'turnId')):
        raise TurnAlreadyAnswered()
    participant = turn.participant
    if user_id and str(user_id) not in (participant.user_id, room.host_user_id):
        raise Unauthorized('Only the player on turn or the host may time out a turn')
    if turn.deadline is None or time.time() < turn.deadline:
        raise InvalidRoomState('Turn has not timed out yet')

    question = turn.question
    _claim_turn(turn, outcome='missed')
    costs_life = bool(current_app.config.get('MISSED_TURN_COSTS_LIFE', True))
    return _settle(room, schedule, participant, turn, question, False, None, costs_life=costs_life)

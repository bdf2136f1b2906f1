import json
from datetime import datetime, timezone
from typing import Optional

from flask import current_app

from echoarena import db
from echoarena.models import Participant, Room, StageSchedule, Turn
from .errors import NoActiveParticipants
from .rooms import arrival_order


def get_schedule(room_id: str, stage_number: int, lock: bool = False) -> Optional[StageSchedule]:
    query = StageSchedule.query.filter_by(room_id=room_id, stage_number=stage_number)
    if lock:
        query = query.with_for_update()
    return query.first()


def _open_turn(schedule: StageSchedule, participant_id: int) -> Turn:
    sequence = Turn.query.filter_by(schedule_id=schedule.id).count() + 1
    turn = Turn(schedule_id=schedule.id, participant_id=participant_id, sequence=sequence, answered=False)
    db.session.add(turn)
    db.session.flush()
    return turn


def initialize_stage_turns(room: Room, stage_number: int) -> StageSchedule:
    """Build the turn order for a stage from the room's active participants.

    Calling it again for a stage that already has a schedule returns that
    schedule untouched.
    """
    schedule = get_schedule(room.id, stage_number)
    if schedule:
        current_app.logger.info(f"[turn-init-skip] room={room.id} stage={stage_number} already initialized")
        return schedule

    entrants = arrival_order(room.id, status='active')
    if not entrants:
        raise NoActiveParticipants()

    schedule = StageSchedule(
        room_id=room.id,
        stage_number=stage_number,
        status='active',
        turn_order=json.dumps([p.id for p in entrants]),
        cursor=0,
    )
    db.session.add(schedule)
    db.session.flush()
    _open_turn(schedule, entrants[0].id)
    current_app.logger.info(
        f"[turn-init] room={room.id} stage={stage_number} order={[p.id for p in entrants]}"
    )
    return schedule


def get_current_turn(room_id: str, stage_number: int) -> Optional[Turn]:
    schedule = get_schedule(room_id, stage_number)
    if not schedule:
        return None
    return schedule.current_turn


def advance(schedule: StageSchedule) -> Optional[Turn]:
    """Move the cursor to the next active participant still owed an attempt.

    The current turn must already be closed. Eliminated and departed
    participants are skipped; the scan wraps to the start of the order before
    giving up, and when nobody is owed a turn the schedule is complete.
    """
    order = schedule.order
    statuses = {}
    if order:
        statuses = {p.id: p.status for p in Participant.query.filter(Participant.id.in_(order)).all()}
    attempted = {
        t.participant_id
        for t in Turn.query.filter_by(schedule_id=schedule.id, answered=True).all()
        if t.outcome != 'skipped'
    }

    start = schedule.cursor + 1 if schedule.cursor is not None else 0
    positions = list(range(start, len(order))) + list(range(0, min(start, len(order))))
    for position in positions:
        participant_id = order[position]
        if statuses.get(participant_id) == 'active' and participant_id not in attempted:
            schedule.cursor = position
            turn = _open_turn(schedule, participant_id)
            current_app.logger.info(
                f"[turn-advance] room={schedule.room_id} stage={schedule.stage_number} "
                f"cursor={position} participant={participant_id}"
            )
            return turn

    schedule.status = 'complete'
    schedule.cursor = None
    db.session.flush()
    current_app.logger.info(f"[stage-complete] room={schedule.room_id} stage={schedule.stage_number}")
    return None


def skip_departed(schedule: StageSchedule) -> bool:
    """Close the current turn if its participant is no longer active.

    Returns True when the cursor moved.
    """
    turn = schedule.current_turn
    if not turn or turn.participant.status == 'active':
        return False
    turn.answered = True
    turn.outcome = 'skipped'
    turn.answered_at = datetime.now(timezone.utc)
    db.session.flush()
    advance(schedule)
    return True


def is_stage_complete(room_id: str, stage_number: int) -> bool:
    schedule = get_schedule(room_id, stage_number)
    return bool(schedule and schedule.status == 'complete')

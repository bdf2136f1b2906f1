import random
import re
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy.exc import IntegrityError

from echoarena import db
from echoarena.models import Participant, Room, User
from .errors import (
    CodeExhausted,
    InvalidCodeFormat,
    InvalidSubmission,
    InvalidUser,
    RoomNotFound,
    RoomNotJoinable,
    Unauthorized,
)

# 0/O and 1/I are left out so codes survive being read aloud
ROOM_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'


def generate_room_code(length: int = 6) -> str:
    return ''.join(random.choices(ROOM_CODE_ALPHABET, k=length))


def normalize_room_code(room_code) -> str:
    """Upper-case a user-entered code and check it is 6 characters of [A-Z0-9]."""
    if not isinstance(room_code, str):
        raise InvalidCodeFormat()
    code = room_code.strip().upper()
    length = int(current_app.config.get('ROOM_CODE_LENGTH', 6))
    if not re.fullmatch(rf'[A-Z0-9]{{{length}}}', code):
        raise InvalidCodeFormat()
    return code


def require_user(user_id) -> User:
    if not user_id:
        raise InvalidUser('User ID required')
    user = db.session.get(User, str(user_id))
    if not user:
        raise InvalidUser()
    return user


def get_room(room_id: str, lock: bool = False) -> Room:
    query = Room.query.filter_by(id=room_id)
    if lock:
        query = query.with_for_update()
    room = query.first()
    if not room:
        raise RoomNotFound()
    return room


def arrival_order(room_id: str, status=None):
    """Participants of a room in join order, optionally filtered by status."""
    query = Participant.query.filter_by(room_id=room_id)
    if status:
        query = query.filter_by(status=status)
    return query.order_by(Participant.joined_at, Participant.id).all()


def _parse_max_stages(value) -> int:
    cfg = current_app.config
    if value is None:
        return int(cfg.get('DEFAULT_MAX_STAGES', 10))
    if isinstance(value, bool):
        raise InvalidSubmission('maxStages must be an integer')
    try:
        stages = int(value)
    except (TypeError, ValueError):
        raise InvalidSubmission('maxStages must be an integer')
    limit = int(cfg.get('MAX_STAGES_LIMIT', 15))
    if not 1 <= stages <= limit:
        raise InvalidSubmission(f'maxStages must be between 1 and {limit}')
    return stages


def _new_participant(room_id: str, user_id: str) -> Participant:
    return Participant(
        room_id=room_id,
        user_id=user_id,
        lives_remaining=int(current_app.config.get('STARTING_LIVES', 3)),
        total_score=0,
        status='active',
    )


def create_room(host_user_id, max_stages=None):
    """Create a waiting room with a fresh join code and seat its host.

    Room and host membership are committed together.
    """
    host_id = require_user(host_user_id).id
    stages = _parse_max_stages(max_stages)
    cfg = current_app.config
    length = int(cfg.get('ROOM_CODE_LENGTH', 6))
    attempts = int(cfg.get('ROOM_CODE_MAX_ATTEMPTS', 10))

    room = None
    for attempt in range(1, attempts + 1):
        code = generate_room_code(length)
        if Room.query.filter_by(room_code=code).first():
            current_app.logger.info(f"[room-code] collision code={code} attempt={attempt}")
            continue
        candidate = Room(
            room_code=code,
            host_user_id=host_id,
            max_stages=stages,
            status='waiting',
            current_stage=0,
        )
        db.session.add(candidate)
        try:
            db.session.flush()
        except IntegrityError:
            # Lost a race for the same code
            db.session.rollback()
            current_app.logger.info(f"[room-code] concurrent collision code={code} attempt={attempt}")
            continue
        room = candidate
        break

    if room is None:
        current_app.logger.warning(f"[room-code] exhausted after {attempts} attempts")
        raise CodeExhausted()

    host = _new_participant(room.id, host_id)
    db.session.add(host)
    db.session.commit()
    current_app.logger.info(f"[room-create] room={room.id} code={room.room_code} host={host_id} stages={stages}")
    return room, host


def join_room(room_code, user_id):
    """Join a waiting room by code.

    Returns ``(room, participant, joined_now)``; an existing active membership
    is returned as-is.
    """
    code = normalize_room_code(room_code)
    user = require_user(user_id)

    room = Room.query.filter_by(room_code=code, status='waiting').with_for_update().first()
    if not room:
        raise RoomNotJoinable()

    existing = Participant.query.filter_by(room_id=room.id, user_id=user.id).first()
    if existing:
        if existing.status == 'active':
            return room, existing, False
        if existing.status == 'eliminated':
            raise RoomNotJoinable('You were eliminated from this room')
        existing.status = 'active'
        existing.lives_remaining = int(current_app.config.get('STARTING_LIVES', 3))
        existing.total_score = 0
        existing.joined_at = datetime.now(timezone.utc)
        db.session.commit()
        current_app.logger.info(f"[room-rejoin] room={room.id} user={user.id}")
        return room, existing, True

    room_id, member_id = room.id, user.id
    participant = _new_participant(room_id, member_id)
    db.session.add(participant)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        participant = Participant.query.filter_by(room_id=room_id, user_id=member_id).first()
        if participant is None:
            # The room was deleted under us
            current_app.logger.info(f"[room-join] room={room_id} user={member_id} room gone")
            raise RoomNotJoinable()
        # A concurrent join for the same user won
        return room, participant, False
    current_app.logger.info(f"[room-join] room={room.id} user={user.id}")
    return room, participant, True


def leave_room(room_id: str, user_id) -> bool:
    """Mark the caller as left; delete the room once nobody but leavers remains.

    Runs with the room row locked and leaves the commit to the caller, so the
    membership change and host reassignment land together. Returns True when
    the room was deleted.
    """
    room = get_room(room_id, lock=True)
    if not user_id:
        raise Unauthorized('User ID required')
    participant = Participant.query.filter_by(room_id=room.id, user_id=str(user_id)).first()
    if not participant:
        raise Unauthorized('You are not in this room')

    participant.status = 'left'
    db.session.flush()

    remaining = [p for p in arrival_order(room.id) if p.status != 'left']
    if not remaining:
        db.session.delete(room)
        current_app.logger.info(f"[room-delete] room={room.id} last participant left")
        return True

    if room.host_user_id == participant.user_id:
        successor = next((p for p in remaining if p.status == 'active'), None)
        if successor:
            room.host_user_id = successor.user_id
            current_app.logger.info(f"[room-host] room={room.id} host {participant.user_id} -> {successor.user_id}")
    current_app.logger.info(f"[room-leave] room={room.id} user={participant.user_id}")
    return False

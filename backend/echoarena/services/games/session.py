"""Session controller: the room lifecycle waiting -> playing -> finished.

Every public operation here is one transaction; domain events are emitted
only after the commit.
"""
from flask import current_app

from echoarena import db
from . import events, questions, rooms, turns
from .deadlines import schedule_turn_timer, stamp_deadline
from .errors import InvalidRoomState, NoQuestionsAvailable, Unauthorized


def voice_channel_name(room_id: str) -> str:
    prefix = current_app.config.get('VOICE_CHANNEL_PREFIX', 'agora-arena-')
    return f"{prefix}{room_id[:8]}"


def _emit_turn(room_id: str, schedule) -> None:
    turn = schedule.current_turn
    events.emit_game_event(
        room_id, events.TURN_CHANGED,
        turn=turn.to_dict() if turn else None,
        stageNumber=schedule.stage_number,
        stageComplete=schedule.status == 'complete',
    )


def start_game(room_id: str, user_id=None) -> str:
    """Move a waiting room into stage 1 and return its voice channel name.

    Starting a game that is already playing returns the same channel.
    """
    room = rooms.get_room(room_id, lock=True)
    if user_id and str(user_id) != room.host_user_id:
        raise Unauthorized('Only the host can start the game')
    if room.status == 'playing':
        return room.voice_channel or voice_channel_name(room.id)
    if room.status != 'waiting':
        raise InvalidRoomState('Game has already finished')

    min_players = int(current_app.config.get('MIN_PLAYERS', 1))
    if len(rooms.arrival_order(room.id, status='active')) < min_players:
        raise InvalidRoomState(f'At least {min_players} players are required to start')

    room.status = 'playing'
    room.current_stage = 1
    room.voice_channel = voice_channel_name(room.id)
    schedule = turns.initialize_stage_turns(room, 1)
    db.session.commit()
    current_app.logger.info(f"[game-start] room={room.id} channel={room.voice_channel}")

    _emit_turn(room.id, schedule)
    return room.voice_channel


def advance_stage(room_id: str, from_stage=None) -> dict:
    """Open the next stage, or finish the game once the last one is done.

    ``from_stage`` lets a client say which stage it saw complete; a stale
    value means another caller already advanced and nothing changes.
    """
    room = rooms.get_room(room_id, lock=True)
    if room.status == 'finished':
        return {'gameFinished': True}
    if room.status != 'playing':
        raise InvalidRoomState('Game has not started')
    if from_stage is not None and str(from_stage) != str(room.current_stage):
        return {'gameFinished': False, 'nextStage': room.current_stage}

    previous = room.current_stage
    next_stage = previous + 1
    survivors = rooms.arrival_order(room.id, status='active')
    if next_stage > room.max_stages or not survivors:
        room.status = 'finished'
        room.current_stage = room.max_stages + 1
        db.session.commit()
        current_app.logger.info(f"[finish] room={room.id} finished at stage={previous}")
        events.emit_game_event(room.id, events.GAME_FINISHED)
        return {'gameFinished': True}

    room.current_stage = next_stage
    schedule = turns.initialize_stage_turns(room, next_stage)
    db.session.commit()
    current_app.logger.info(f"[stage-advance] room={room.id} stage {previous} -> {next_stage}/{room.max_stages}")

    events.emit_game_event(room.id, events.STAGE_COMPLETE, stageNumber=previous, nextStage=next_stage)
    _emit_turn(room.id, schedule)
    return {'gameFinished': False, 'nextStage': next_stage}


def load_question(room_id: str, category_id=None, difficulty=None):
    """Assign a question to the current turn and arm its deadline.

    Returns ``(question, turn)``. A turn that already has a question keeps it.
    """
    room = rooms.get_room(room_id)
    if room.status != 'playing':
        raise InvalidRoomState('Game is not in progress')
    schedule = turns.get_schedule(room.id, room.current_stage, lock=True)
    turn = schedule.current_turn if schedule else None
    if turn is None:
        raise InvalidRoomState('No turn is waiting for a question')
    if turn.question_id:
        return turn.question, turn

    exclude = questions.used_question_ids(room.id)
    level = difficulty or questions.stage_difficulty(room.current_stage, room.max_stages)
    try:
        question = questions.select_random_question(category_id, level, exclude_ids=exclude)
    except NoQuestionsAvailable:
        if difficulty:
            raise
        # Stage difficulty is only a preference
        question = questions.select_random_question(category_id, None, exclude_ids=exclude)

    questions.mark_used(room.id, question.id, room.current_stage)
    turn.question_id = question.id
    app = current_app._get_current_object()
    stamp_deadline(app, turn)
    db.session.commit()
    current_app.logger.info(
        f"[question] room={room.id} stage={room.current_stage} turn={turn.id} "
        f"question={question.id} difficulty={question.difficulty}"
    )

    events.emit_game_event(
        room.id, events.QUESTION_LOADED,
        question=question.to_dict(), stageNumber=room.current_stage,
        turnId=turn.id, deadline=turn.deadline,
    )
    schedule_turn_timer(app, turn.id)
    return question, turn


def leave_room(room_id: str, user_id) -> bool:
    """Leave a room; a departing player on turn forfeits it.

    Returns True when the room was deleted.
    """
    room_deleted = rooms.leave_room(room_id, user_id)
    schedule = None
    moved = False
    if not room_deleted:
        room = rooms.get_room(room_id)
        if room.status == 'playing':
            schedule = turns.get_schedule(room.id, room.current_stage, lock=True)
            if schedule:
                moved = turns.skip_departed(schedule)
    db.session.commit()

    if moved:
        _emit_turn(room_id, schedule)
    return room_deleted


def get_state(room_id: str) -> dict:
    room = rooms.get_room(room_id)
    # sorted() is stable, so equal scores keep arrival order
    participants = sorted(rooms.arrival_order(room.id), key=lambda p: p.total_score, reverse=True)
    current_turn = None
    stage_complete = False
    if room.status == 'playing':
        current_turn = turns.get_current_turn(room.id, room.current_stage)
        stage_complete = turns.is_stage_complete(room.id, room.current_stage)
    return {
        'room': room.to_dict(),
        'participants': [p.to_dict() for p in participants],
        'currentTurn': current_turn.to_dict() if current_turn else None,
        'stageComplete': stage_complete,
    }

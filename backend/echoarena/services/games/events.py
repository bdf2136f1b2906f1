from echoarena import socketio

QUESTION_LOADED = 'QUESTION_LOADED'
TURN_CHANGED = 'TURN_CHANGED'
ANSWER_SUBMITTED = 'ANSWER_SUBMITTED'
PLAYER_ELIMINATED = 'PLAYER_ELIMINATED'
STAGE_COMPLETE = 'STAGE_COMPLETE'
GAME_FINISHED = 'GAME_FINISHED'


def broadcast_room(room_id: str) -> str:
    return f"room:{room_id}"


def emit_game_event(room_id: str, event_type: str, **payload) -> None:
    """Push a domain event to every client subscribed to the room.

    Callers emit only after the corresponding state change is committed.
    """
    payload['type'] = event_type
    socketio.emit('game-event', payload, to=broadcast_room(room_id), namespace='/ws')

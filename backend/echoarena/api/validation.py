import re

from flask import request

from echoarena.services.games.errors import InvalidSubmission

UUID_PATTERN = re.compile(r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$', re.IGNORECASE)


def require_room_id(room_id: str) -> str:
    if not room_id or not UUID_PATTERN.match(room_id):
        raise InvalidSubmission(f'Invalid room ID format: {room_id}')
    return room_id.lower()


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

from flask import Blueprint, jsonify
from flask_login import current_user

from echoarena.api.validation import json_body, require_room_id
from echoarena.services.games import rooms as room_registry
from echoarena.services.games import session

rooms = Blueprint('rooms', __name__)


@rooms.route('/create', methods=['POST'])
def create_room():
    data = json_body()
    room, _host = room_registry.create_room(data.get('userId'), data.get('maxStages'))
    return jsonify({'success': True, 'room': room.summary()}), 201


@rooms.route('/join', methods=['POST'])
def join_room():
    data = json_body()
    room, _participant, joined_now = room_registry.join_room(data.get('roomCode'), data.get('userId'))
    return jsonify({
        'success': True,
        'message': 'Joined room successfully' if joined_now else 'Already in room',
        'room': room.summary(),
    })


@rooms.route('/<string:room_id>/leave', methods=['POST'])
def leave_room(room_id):
    room_id = require_room_id(room_id)
    data = json_body()
    user_id = data.get('userId')
    if not user_id and current_user.is_authenticated:
        user_id = current_user.id
    room_deleted = session.leave_room(room_id, user_id)
    return jsonify({'success': True, 'roomDeleted': room_deleted})

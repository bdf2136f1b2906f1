from flask import Blueprint, jsonify, request

from echoarena.api.validation import json_body, require_room_id
from echoarena.services.games import adjudicator, session
from echoarena.services.games.errors import InvalidUser

games = Blueprint('games', __name__)


@games.route('/<string:room_id>/start', methods=['POST'])
def start_game(room_id):
    room_id = require_room_id(room_id)
    data = json_body()
    voice_channel = session.start_game(room_id, data.get('userId'))
    return jsonify({'success': True, 'voiceChannelName': voice_channel})


@games.route('/<string:room_id>/state', methods=['GET'])
def get_game_state(room_id):
    room_id = require_room_id(room_id)
    return jsonify({'success': True, 'game': session.get_state(room_id)})


@games.route('/<string:room_id>/question', methods=['GET'])
def get_question(room_id):
    room_id = require_room_id(room_id)
    question, turn = session.load_question(
        room_id,
        category_id=request.args.get('category_id'),
        difficulty=request.args.get('difficulty'),
    )
    return jsonify({
        'success': True,
        'question': question.to_dict(),
        'turnId': turn.id,
        'deadline': turn.deadline,
    })


@games.route('/<string:room_id>/answer', methods=['POST'])
def submit_answer(room_id):
    room_id = require_room_id(room_id)
    data = json_body()
    result, stage_complete = adjudicator.submit_answer(
        room_id,
        stage_number=data.get('stageNumber'),
        user_id=data.get('userId'),
        question_id=data.get('questionId'),
        selected_answer=data.get('selectedAnswer'),
        time_taken=data.get('timeTaken'),
        voice_transcript=data.get('voiceTranscript'),
    )
    return jsonify({'success': True, 'result': result, 'stageComplete': stage_complete})


@games.route('/<string:room_id>/timeout', methods=['POST'])
def time_out_turn(room_id):
    room_id = require_room_id(room_id)
    data = json_body()
    if not data.get('userId'):
        raise InvalidUser('User ID required')
    result, stage_complete = adjudicator.expire_turn(
        room_id,
        stage_number=data.get('stageNumber'),
        turn_id=data.get('turnId'),
        user_id=data.get('userId'),
    )
    return jsonify({'success': True, 'result': result, 'stageComplete': stage_complete})


@games.route('/<string:room_id>/next-stage', methods=['POST'])
def next_stage(room_id):
    room_id = require_room_id(room_id)
    data = json_body()
    outcome = session.advance_stage(room_id, from_stage=data.get('stageNumber'))
    return jsonify({'success': True, **outcome})

from flask import Blueprint, jsonify, request

from echoarena.services.games.questions import select_random_question

questions = Blueprint('questions', __name__)


@questions.route('/random', methods=['GET'])
def random_question():
    question = select_random_question(
        category_id=request.args.get('category_id'),
        difficulty=request.args.get('difficulty'),
    )
    return jsonify({'success': True, 'question': question.to_dict()})

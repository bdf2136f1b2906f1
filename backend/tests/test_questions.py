import pytest

from echoarena.models import Question
from echoarena.services.games import questions as pool
from echoarena.services.games.errors import InvalidSubmission, NoQuestionsAvailable


def test_stage_difficulty_ramps_in_thirds():
    assert [pool.stage_difficulty(stage, 9) for stage in range(1, 10)] == (
        ['easy'] * 3 + ['medium'] * 3 + ['hard'] * 3
    )
    assert pool.stage_difficulty(1, 1) == 'hard'
    assert pool.stage_difficulty(1, 2) == 'medium'
    assert pool.stage_difficulty(2, 2) == 'hard'
    assert pool.stage_difficulty(0, 10) == 'medium'
    assert pool.stage_difficulty(3, 0) == 'medium'


def test_select_filters_by_difficulty_and_category(flask_app, question_bank):
    for _ in range(10):
        assert pool.select_random_question(difficulty='hard').difficulty == 'hard'

    category_id = Question.query.first().category_id
    for _ in range(10):
        assert pool.select_random_question(category_id=category_id).category_id == category_id
    assert pool.select_random_question(category_id=str(category_id)).category_id == category_id

    easy = pool.select_random_question(difficulty='EASY')
    assert easy.difficulty == 'easy'


def test_select_avoids_excluded_questions(flask_app, question_bank):
    medium_ids = [q.id for q in Question.query.filter_by(difficulty='medium').all()]
    for _ in range(10):
        picked = pool.select_random_question(difficulty='medium', exclude_ids=[medium_ids[0]])
        assert picked.id == medium_ids[1]


def test_select_repeats_once_everything_is_excluded(flask_app, question_bank):
    medium_ids = {q.id for q in Question.query.filter_by(difficulty='medium').all()}
    picked = pool.select_random_question(difficulty='medium', exclude_ids=medium_ids)
    assert picked.id in medium_ids


def test_select_raises_when_pool_is_empty(flask_app, question_bank):
    with pytest.raises(NoQuestionsAvailable):
        pool.select_random_question(category_id=9999)


def test_select_rejects_unknown_difficulty(flask_app, question_bank):
    with pytest.raises(InvalidSubmission):
        pool.select_random_question(difficulty='impossible')
    with pytest.raises(InvalidSubmission):
        pool.select_random_question(category_id='science')


def test_used_questions_are_tracked_per_room(flask_app, users, new_room, question_bank):
    from echoarena import db
    room = new_room(users['alice'])
    pool.mark_used(room['id'], question_bank[0], 1)
    pool.mark_used(room['id'], question_bank[0], 1)
    pool.mark_used(room['id'], question_bank[1], 2)
    db.session.commit()

    assert pool.used_question_ids(room['id']) == {question_bank[0], question_bank[1]}
    assert pool.used_question_ids(room['id'], stage_number=2) == {question_bank[1]}
    assert pool.used_question_ids('00000000-0000-4000-8000-000000000000') == set()


def test_random_question_endpoint_hides_answer(client, question_bank):
    res = client.get('/api/questions/random?difficulty=easy')
    assert res.status_code == 200
    question = res.get_json()['question']
    assert question['difficulty'] == 'easy'
    assert 'correct_answer' not in question
    assert {'option_a', 'option_b', 'option_c', 'option_d', 'question_text'} <= set(question)


def test_random_question_endpoint_errors(client, question_bank):
    res = client.get('/api/questions/random?category_id=9999')
    assert res.status_code == 404
    assert res.get_json()['code'] == 'no_questions_available'

    res = client.get('/api/questions/random?difficulty=legendary')
    assert res.status_code == 400

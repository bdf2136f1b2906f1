import os
import sys
import pytest

# Ensure the backend root (containing the `echoarena` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from echoarena import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    STARTING_LIVES = 3
    ROOM_CODE_LENGTH = 6
    ROOM_CODE_MAX_ATTEMPTS = 10
    DEFAULT_MAX_STAGES = 10
    MAX_STAGES_LIMIT = 15
    MIN_PLAYERS = 1
    READING_DURATION_SEC = 5
    ANSWER_DURATION_SEC = 10
    DEADLINE_GRACE_SEC = 2
    MISSED_TURN_COSTS_LIFE = True
    SCORING_POLICY = 'flat'
    BASE_POINTS = 100
    VOICE_CHANNEL_PREFIX = 'agora-arena-'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import echoarena.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def users(flask_app):
    """Three registered players, keyed by name, valued by user id."""
    from echoarena.models import User
    created = {}
    for name in ('alice', 'bob', 'cara'):
        user = User(username=name)
        db.session.add(user)
        db.session.flush()
        created[name] = user.id
    db.session.commit()
    return created


@pytest.fixture()
def question_bank(flask_app):
    """Two categories with questions at every difficulty; returns their ids."""
    from echoarena.models import Category, Question
    science = Category(name='Science')
    history = Category(name='History')
    db.session.add_all([science, history])
    db.session.flush()
    ids = []
    letters = 'ABCD'
    for index, difficulty in enumerate(['easy', 'easy', 'medium', 'medium', 'hard', 'hard']):
        category = science if index % 2 == 0 else history
        question = Question(
            category_id=category.id,
            difficulty=difficulty,
            question_text=f'{difficulty} question {index}',
            option_a='one', option_b='two', option_c='three', option_d='four',
            correct_answer=letters[index % 4],
        )
        db.session.add(question)
        db.session.flush()
        ids.append(question.id)
    db.session.commit()
    return ids


@pytest.fixture()
def answers(flask_app):
    """Look up the right and a wrong option for a question id."""
    from echoarena.models import Question

    class Answers:
        def correct(self, question_id):
            return db.session.get(Question, question_id).correct_answer

        def wrong(self, question_id):
            right = self.correct(question_id)
            return next(letter for letter in 'ABCD' if letter != right)

    return Answers()


@pytest.fixture()
def new_room(client):
    """Create a room over HTTP for a host and return its summary."""
    def _create(host_id, max_stages=2):
        res = client.post('/api/rooms/create', json={'userId': host_id, 'maxStages': max_stages})
        assert res.status_code == 201
        return res.get_json()['room']
    return _create

import random
from typing import Iterable, Optional

from echoarena import db
from echoarena.models import Question, UsedQuestion
from .errors import InvalidSubmission, NoQuestionsAvailable

DIFFICULTIES = ('easy', 'medium', 'hard')


def stage_difficulty(stage_number: int, max_stages: int) -> str:
    """Ramp difficulty over the game: first third easy, middle medium, rest hard."""
    if not stage_number or not max_stages or stage_number < 1:
        return 'medium'
    progress = stage_number / max_stages
    if progress <= 1 / 3:
        return 'easy'
    if progress <= 2 / 3:
        return 'medium'
    return 'hard'


def _parse_category(category_id) -> Optional[int]:
    if category_id in (None, ''):
        return None
    try:
        return int(category_id)
    except (TypeError, ValueError):
        raise InvalidSubmission('category_id must be an integer')


def _parse_difficulty(difficulty) -> Optional[str]:
    if difficulty in (None, ''):
        return None
    value = str(difficulty).lower()
    if value not in DIFFICULTIES:
        raise InvalidSubmission(f"difficulty must be one of {', '.join(DIFFICULTIES)}")
    return value


def select_random_question(category_id=None, difficulty=None, exclude_ids: Iterable[int] = ()) -> Question:
    """Pick a question uniformly at random from the filtered pool.

    Questions in ``exclude_ids`` are avoided while anything else matches;
    once they are all that is left, repeats are allowed so play can go on.
    """
    query = Question.query
    category = _parse_category(category_id)
    level = _parse_difficulty(difficulty)
    if category is not None:
        query = query.filter_by(category_id=category)
    if level is not None:
        query = query.filter_by(difficulty=level)

    excluded = set(exclude_ids or ())
    if excluded:
        fresh = query.filter(Question.id.notin_(excluded)).all()
        if fresh:
            return random.choice(fresh)

    pool = query.all()
    if not pool:
        raise NoQuestionsAvailable()
    return random.choice(pool)


def used_question_ids(room_id: str, stage_number=None) -> set:
    query = db.session.query(UsedQuestion.question_id).filter(UsedQuestion.room_id == room_id)
    if stage_number is not None:
        query = query.filter(UsedQuestion.stage_number == stage_number)
    return {row.question_id for row in query.all()}


def mark_used(room_id: str, question_id: int, stage_number: int) -> None:
    if UsedQuestion.query.filter_by(room_id=room_id, question_id=question_id, stage_number=stage_number).first():
        return
    db.session.add(UsedQuestion(room_id=room_id, question_id=question_id, stage_number=stage_number))

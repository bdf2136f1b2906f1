from typing import Callable, Dict, Optional

from flask import current_app


def flat_points(time_taken: Optional[float], base: int, answer_window: int) -> int:
    """Every correct answer is worth the same."""
    return base


def time_weighted_points(time_taken: Optional[float], base: int, answer_window: int) -> int:
    """Base points plus a bonus of up to ``base`` for answering quickly.

    The bonus scales with the unused share of the answer window; a missing or
    out-of-range time earns no bonus.
    """
    if time_taken is None or answer_window <= 0:
        return base
    remaining = max(0.0, answer_window - float(time_taken)) / answer_window
    return base + int(round(base * min(1.0, remaining)))


SCORING_POLICIES: Dict[str, Callable[[Optional[float], int, int], int]] = {
    'flat': flat_points,
    'time_weighted': time_weighted_points,
}


def points_for_correct_answer(time_taken: Optional[float]) -> int:
    cfg = current_app.config
    policy = SCORING_POLICIES.get(cfg.get('SCORING_POLICY', 'flat'), flat_points)
    points = policy(time_taken, int(cfg.get('BASE_POINTS', 100)), int(cfg.get('ANSWER_DURATION_SEC', 10)))
    return max(0, int(points))

import time
from typing import Set

from echoarena import db, socketio
from echoarena.models import Turn
from .adjudicator import expire_turn
from .errors import GameError


_scheduled_turn_ids: Set[int] = set()


def turn_window(app) -> int:
    """Seconds a player has from question load until the turn is missed."""
    cfg = app.config
    return (
        int(cfg.get('READING_DURATION_SEC', 5))
        + int(cfg.get('ANSWER_DURATION_SEC', 10))
        + int(cfg.get('DEADLINE_GRACE_SEC', 2))
    )


def stamp_deadline(app, turn: Turn) -> float:
    turn.deadline = time.time() + turn_window(app)
    return turn.deadline


def schedule_turn_timer(app, turn_id: int) -> None:
    """Schedule the missed-turn fallback for a turn whose question is showing.

    - No-ops in TESTING mode
    - Uses turn.deadline, which clients also read for countdowns
    - Ensures a single timer per turn
    - On expiry, a turn that is still open goes through expire_turn
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return

    with app.app_context():
        turn = db.session.get(Turn, turn_id)
        if not turn or turn.answered or not turn.deadline:
            return
        room_id = turn.schedule.room_id
        stage_number = turn.schedule.stage_number
        deadline = turn.deadline

        if turn_id in _scheduled_turn_ids:
            app.logger.info(f"[timer-skip] room={room_id} stage={stage_number} turn={turn_id} already scheduled")
            return
        _scheduled_turn_ids.add(turn_id)
        app.logger.info(
            f"[timer-set] room={room_id} stage={stage_number} turn={turn_id} deadline={deadline}"
        )

    def _worker(tid: int, rid: str, expected_stage: int, due: float):
        hb = int(app.config.get('TIMER_HEARTBEAT_SEC', 0))
        remaining = max(0.0, due - time.time())
        if hb > 0:
            while remaining > 0:
                step = min(hb, remaining)
                time.sleep(step)
                remaining = max(0.0, due - time.time())
                app.logger.info(f"[timer-heartbeat] room={rid} turn={tid} remaining={remaining:.1f}s")
        else:
            # sleep() may return a hair early against the wall clock
            while remaining > 0:
                time.sleep(remaining)
                remaining = max(0.0, due - time.time())

        with app.app_context():
            _scheduled_turn_ids.discard(tid)
            current = db.session.get(Turn, tid)
            app.logger.info(
                f"[timer-fire] room={rid} turn={tid} expected_stage={expected_stage} "
                f"answered={current.answered if current else None}"
            )
            if not current or current.answered:
                app.logger.info(f"[timer-abort] room={rid} turn={tid} already closed")
                return
            try:
                expire_turn(rid, expected_stage, turn_id=tid)
            except GameError as exc:
                # Answered, left or advanced between the check and the claim
                app.logger.info(f"[timer-abort] room={rid} turn={tid} {exc.code}")

    if app.config.get('TESTING'):
        _worker(turn_id, room_id, stage_number, deadline)
    else:
        socketio.start_background_task(_worker, turn_id, room_id, stage_number, deadline)

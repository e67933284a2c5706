import time
from typing import Set

from wordrush import db, socketio
from wordrush.models import GameSession


_scheduled_rounds: Set[int] = set()


def emit_round_finished(session: GameSession) -> None:
    socketio.emit(
        'round_finished',
        {'session_id': session.id, 'score': session.score, 'gems_earned': session.gems_earned},
        to=f"session:{session.id}",
        namespace='/ws',
    )


def schedule_round_timeout(app, session_id: int) -> None:
    """Finalize the round if the player never submits.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Ensures a single timer per session
    - Fires after ROUND_SECONDS + ROUND_GRACE_SEC; a round submitted in the
      meantime is left untouched
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return
    if session_id in _scheduled_rounds:
        app.logger.info(f"[timer-skip] session={session_id} already scheduled")
        return
    _scheduled_rounds.add(session_id)

    delay = int(app.config.get('ROUND_SECONDS', 100)) + int(app.config.get('ROUND_GRACE_SEC', 15))
    app.logger.info(f"[timer-set] session={session_id} delay={delay}s")

    def _worker(sid: int, wait: int):
        if wait > 0:
            time.sleep(wait)
        with app.app_context():
            _scheduled_rounds.discard(sid)
            from .engine import RoundEngine
            try:
                session = RoundEngine.from_app(app).expire(sid)
            except Exception as exc:
                db.session.rollback()
                app.logger.error(f"[timer-fail] session={sid}: {exc}")
                return
            if session is None:
                app.logger.info(f"[timer-abort] session={sid} already completed")
                return
            app.logger.info(f"[timer-fire] session={sid} finalized by timeout")
            emit_round_finished(session)

    if app.config.get('TESTING'):
        _worker(session_id, delay)
    else:
        socketio.start_background_task(_worker, session_id, delay)

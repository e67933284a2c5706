from flask_login import current_user
from flask_socketio import join_room, leave_room, emit


def _session_id(data):
    session_id = (data or {}).get('session_id')
    if session_id is None or isinstance(session_id, bool):
        return None
    try:
        return int(session_id)
    except (TypeError, ValueError):
        return None


def _owns_session(session_id: int) -> bool:
    from wordrush.models import GameSession

    if not current_user.is_authenticated:
        return False
    return GameSession.query.filter_by(id=session_id, user_id=current_user.id).first() is not None


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_session(data):
    session_id = _session_id(data)
    if session_id is None:
        emit('error', {'message': 'session_id is required'})
        return
    # Only the round's owner may listen for its result
    if not _owns_session(session_id):
        emit('error', {'message': 'Session not found', 'code': 'session_not_found'})
        return
    room = f"session:{session_id}"
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_session(data):
    session_id = _session_id(data)
    if session_id is None:
        emit('error', {'message': 'session_id is required'})
        return
    room = f"session:{session_id}"
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    from wordrush import socketio

    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_session', handle_join_session, namespace=namespace)
        socketio.on_event('leave_session', handle_leave_session, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)

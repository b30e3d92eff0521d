from flask import current_app, request
from flask_socketio import emit
from hijack import get_coordinator, get_presence
from hijack.services.coordination import CoordinationError
from hijack.services.coordination.matchmaking import NO_CLOCK
from typing import Any, Optional


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _room_id(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    room_id = data.get('roomId')
    if not isinstance(room_id, str) or not room_id.strip():
        return None
    return room_id.strip()


def _ignored(event: str, data: Any) -> None:
    current_app.logger.debug(f"[ignored] event={event} sid={_get_sid()} payload={data!r}")


def handle_connect(auth=None):
    sid = _get_sid()
    get_coordinator().connect(sid)
    current_app.logger.info(f"[connect] sid={sid}")
    emit('requestFingerprint')


def handle_disconnect(reason=None):
    get_coordinator().disconnect(_get_sid())


def handle_fingerprint(data):
    fingerprint = data.get('fingerprint') if isinstance(data, dict) else data
    if not isinstance(fingerprint, str) or not fingerprint:
        _ignored('fingerprint', data)
        return
    sid = _get_sid()
    try:
        get_presence().record_connect(sid, fingerprint)
    except Exception:
        current_app.logger.exception(f"[presence-fail] sid={sid} record_connect")


def handle_create_room(data):
    room_id = _room_id(data)
    if room_id is None:
        _ignored('createRoom', data)
        return
    try:
        get_coordinator().rooms.create_room(room_id, _get_sid())
    except CoordinationError as exc:
        emit('error', exc.to_dict())


def handle_join_room(data):
    room_id = _room_id(data)
    if room_id is None:
        _ignored('joinRoom', data)
        return
    try:
        get_coordinator().rooms.join_room(room_id, _get_sid())
    except CoordinationError as exc:
        emit('error', exc.to_dict())


def handle_move(data):
    room_id = _room_id(data)
    if room_id is None:
        _ignored('move', data)
        return
    get_coordinator().relay.move(_get_sid(), room_id, data)


def handle_game_over(data):
    room_id = _room_id(data)
    if room_id is None:
        _ignored('gameOver', data)
        return
    get_coordinator().relay.game_over(_get_sid(), room_id, data.get('reason'))


def handle_time_control_set(data):
    room_id = _room_id(data)
    if room_id is None:
        _ignored('timeControlSet', data)
        return
    get_coordinator().relay.time_control_set(_get_sid(), room_id, data.get('timeControl'))


def handle_rematch_request(data):
    room_id = _room_id(data)
    if room_id is None:
        _ignored('rematchRequest', data)
        return
    get_coordinator().relay.rematch_request(_get_sid(), room_id)


def handle_rematch_accept(data):
    room_id = _room_id(data)
    if room_id is None:
        _ignored('rematchAccept', data)
        return
    get_coordinator().relay.rematch_accept(_get_sid(), room_id)


def handle_rematch_decline(data):
    room_id = _room_id(data)
    if room_id is None:
        _ignored('rematchDecline', data)
        return
    get_coordinator().relay.rematch_decline(_get_sid(), room_id)


def handle_find_match(data=None):
    data = data if isinstance(data, dict) else {}
    time_control = data.get('timeControl') or NO_CLOCK
    if not isinstance(time_control, str):
        _ignored('findMatch', data)
        return
    get_coordinator().queue.enqueue(_get_sid(), time_control, bool(data.get('ignoreTime')))


def handle_cancel_matchmaking(data=None):
    get_coordinator().queue.cancel(_get_sid())


def handle_leave_room(data):
    room_id = _room_id(data)
    if room_id is None:
        _ignored('leaveRoom', data)
        return
    get_coordinator().rooms.leave(room_id, _get_sid())


HANDLERS = (
    ('connect', handle_connect),
    ('disconnect', handle_disconnect),
    ('fingerprint', handle_fingerprint),
    ('createRoom', handle_create_room),
    ('joinRoom', handle_join_room),
    ('move', handle_move),
    ('gameOver', handle_game_over),
    ('timeControlSet', handle_time_control_set),
    ('rematchRequest', handle_rematch_request),
    ('rematchAccept', handle_rematch_accept),
    ('rematchDecline', handle_rematch_decline),
    ('findMatch', handle_find_match),
    ('cancelMatchmaking', handle_cancel_matchmaking),
    ('leaveRoom', handle_leave_room),
)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    from hijack import socketio
    for event, handler in HANDLERS:
        socketio.on_event(event, handler, namespace=namespace)

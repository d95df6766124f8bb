import threading
import time
from functools import partial

from flask import current_app, request

from typerace import dispatcher, registry, socketio
from typerace.errors import InvalidPayload, RoomError
from typerace.protocol import EVENT_NAMES, CreateRoom, Disconnect, TimeRequest, parse_event
from typerace.services.rooms import transition
from typerace.services.rooms.effects import Direct

# One event at a time across all rooms: lookup -> transition -> write -> dispatch
_event_lock = threading.Lock()


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _now_ms() -> int:
    return int(time.time() * 1000)


def _apply(event, sid: str) -> None:
    """Run one room event to completion. Caller holds ``_event_lock``."""
    room_id = event.room
    result = transition(registry.get(room_id), event, sid, _now_ms())
    if result.room is None:
        registry.delete(room_id)
        current_app.logger.info(f"[room-closed] room={room_id} reason={result.closed} rooms={len(registry)}")
    else:
        if isinstance(event, CreateRoom):
            replacing = room_id in registry
            current_app.logger.info(f"[room-create] room={room_id} host={sid} replacing={replacing}")
        registry.create(room_id, result.room)
    dispatcher.dispatch(result.effects)


def handle_event(name: str, data=None) -> None:
    sid = _get_sid()
    try:
        event = parse_event(name, data)
    except InvalidPayload as exc:
        current_app.logger.info(f"[payload-reject] sid={sid} event={name} reason={exc.reason}")
        dispatcher.send_error(sid, str(exc))
        return

    if isinstance(event, TimeRequest):
        handle_time_request(event, sid)
        return

    with _event_lock:
        try:
            _apply(event, sid)
        except RoomError as exc:
            current_app.logger.info(f"[room-error] sid={sid} event={name} room={event.room} error={exc}")
            dispatcher.send_error(sid, str(exc))


def handle_time_request(event: TimeRequest, sid: str) -> None:
    """Clock-offset calibration echo; not room scoped."""
    dispatcher.dispatch([Direct(sid, 'time:response', {'clientSent': event.client_sent, 'serverTime': _now_ms()})])


def handle_connect(auth=None):
    current_app.logger.debug(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    """Treat a dropped connection as leaving every room it was part of."""
    sid = _get_sid()
    with _event_lock:
        room_ids = registry.rooms_with_member(sid)
        for room_id in room_ids:
            _apply(Disconnect(room=room_id), sid)
    current_app.logger.info(f"[disconnect] sid={sid} rooms_left={len(room_ids)} reason={reason}")


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the room protocol handlers on ``namespace``."""
    dispatcher.namespace = namespace
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    for name in EVENT_NAMES:
        socketio.on_event(name, partial(handle_event, name), namespace=namespace)

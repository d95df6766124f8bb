from typing import Iterable, List

from flask_socketio import close_room, join_room, leave_room

from .effects import Broadcast, CloseChannel, Direct, Subscribe, Unsubscribe


class Dispatcher:
    """Applies transition effects over Socket.IO.

    Room channels are Socket.IO rooms named after the room id, so the server's
    room manager is the subscriber set. Must run inside a socket handler (app
    context). Delivery is fire-and-forget: no acks, no retries.
    """

    def __init__(self, socketio, namespace: str = '/') -> None:
        self.socketio = socketio
        self.namespace = namespace

    def dispatch(self, effects: Iterable) -> None:
        for effect in effects:
            if isinstance(effect, Subscribe):
                join_room(effect.room, sid=effect.sid, namespace=self.namespace)
            elif isinstance(effect, Unsubscribe):
                leave_room(effect.room, sid=effect.sid, namespace=self.namespace)
            elif isinstance(effect, CloseChannel):
                close_room(effect.room, namespace=self.namespace)
            elif isinstance(effect, Broadcast):
                self.socketio.emit(effect.event, effect.payload, to=effect.room, namespace=self.namespace)
            elif isinstance(effect, Direct):
                self.socketio.emit(effect.event, effect.payload, to=effect.sid, namespace=self.namespace)
            else:
                raise TypeError(f"Unknown effect {effect!r}")

    def send_error(self, sid: str, message: str) -> None:
        self.dispatch([Direct(sid, 'room:error', {'error': message})])

    def members(self, room: str) -> List[str]:
        return sorted(sid for sid, _ in self.socketio.server.manager.get_participants(self.namespace, room))

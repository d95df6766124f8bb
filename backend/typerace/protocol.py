"""Inbound event shapes for the room protocol.

``parse_event`` is the only way a raw socket payload becomes an event; anything
that does not match its shape is rejected with ``InvalidPayload`` before it can
reach a room.
"""

from dataclasses import dataclass
from numbers import Real
from typing import Any, Callable, Dict, Mapping, Optional, Union

from typerace.errors import InvalidPayload


@dataclass(frozen=True)
class CreateRoom:
    room: str
    text: str
    name: Optional[str] = None


@dataclass(frozen=True)
class JoinRoom:
    room: str
    name: Optional[str] = None


@dataclass(frozen=True)
class ReportProgress:
    room: str
    progress: float
    wpm: float = 0
    accuracy: float = 0


@dataclass(frozen=True)
class SetReady:
    room: str
    ready: bool


@dataclass(frozen=True)
class LeaveRoom:
    room: str


@dataclass(frozen=True)
class StartRace:
    room: str


@dataclass(frozen=True)
class ResetPlayer:
    room: str


@dataclass(frozen=True)
class SetText:
    room: str
    text: str


@dataclass(frozen=True)
class Disconnect:
    """Synthesized by the gateway for each room a dropped connection belonged to."""
    room: str


@dataclass(frozen=True)
class TimeRequest:
    client_sent: float


RoomEvent = Union[CreateRoom, JoinRoom, ReportProgress, SetReady, LeaveRoom,
                  StartRace, ResetPlayer, SetText, Disconnect]


class _Fields:
    def __init__(self, event: str, data: Mapping[str, Any]):
        self.event = event
        self.data = data

    def _get(self, key, required):
        if key not in self.data or self.data[key] is None:
            if required:
                raise InvalidPayload(self.event, f"missing '{key}'")
            return None
        return self.data[key]

    def room(self) -> str:
        value = self._get('room', True)
        if not isinstance(value, str) or not value:
            raise InvalidPayload(self.event, "'room' must be a non-empty string")
        return value

    def string(self, key, required=True) -> Optional[str]:
        value = self._get(key, required)
        if value is not None and not isinstance(value, str):
            raise InvalidPayload(self.event, f"'{key}' must be a string")
        return value

    def number(self, key, required=True, default=None):
        value = self._get(key, required)
        if value is None:
            return default
        # bool is a subclass of int; JSON true/false is not a number here
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidPayload(self.event, f"'{key}' must be a number")
        return value

    def boolean(self, key) -> bool:
        value = self._get(key, True)
        if not isinstance(value, bool):
            raise InvalidPayload(self.event, f"'{key}' must be a boolean")
        return value


_PARSERS: Dict[str, Callable[[_Fields], Any]] = {
    'room:create': lambda f: CreateRoom(room=f.room(), text=f.string('text'), name=f.string('name', required=False)),
    'room:join': lambda f: JoinRoom(room=f.room(), name=f.string('name', required=False)),
    'room:progress': lambda f: ReportProgress(
        room=f.room(),
        progress=f.number('progress'),
        wpm=f.number('wpm', required=False, default=0),
        accuracy=f.number('accuracy', required=False, default=0),
    ),
    'player:ready': lambda f: SetReady(room=f.room(), ready=f.boolean('ready')),
    'room:leave': lambda f: LeaveRoom(room=f.room()),
    'race:start': lambda f: StartRace(room=f.room()),
    'race:reset': lambda f: ResetPlayer(room=f.room()),
    'room:setText': lambda f: SetText(room=f.room(), text=f.string('text')),
    'time:request': lambda f: TimeRequest(client_sent=f.number('clientSent')),
}

EVENT_NAMES = tuple(_PARSERS)


def parse_event(name: str, data: Any):
    """Validate a raw payload and return the typed event for ``name``."""
    parser = _PARSERS.get(name)
    if parser is None:
        raise InvalidPayload(name, 'unknown event')
    if not isinstance(data, Mapping):
        raise InvalidPayload(name, 'payload must be an object')
    return parser(_Fields(name, data))

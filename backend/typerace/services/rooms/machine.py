"""Room state machine.

``transition`` is a pure function of (current room, event): it never touches
the registry or the socket layer, it works on a copy of the room and returns
the next room together with the ordered effects the dispatcher should apply.
Rejected events raise a ``RoomError`` before anything is changed.

Room states are implied by fields, there is no stored tag:

- lobby: ``race_start`` is None
- scheduled/racing: ``race_start`` is set (clients run the countdown)
- closed: the transition returns ``room=None`` and the registry drops it
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from typerace.errors import NotHost, RaceAlreadyStarted, RoomNotFound
from typerace.models import PlayerState, Room
from typerace.protocol import (
    CreateRoom, Disconnect, JoinRoom, LeaveRoom, ReportProgress, ResetPlayer,
    RoomEvent, SetReady, SetText, StartRace,
)
from .effects import Broadcast, CloseChannel, Subscribe, Unsubscribe

logger = logging.getLogger(__name__)

RACE_COUNTDOWN_MS = 5000

CLOSE_EMPTY = 'empty'
CLOSE_HOST_LEFT = 'host-left'


@dataclass
class Transition:
    room: Optional[Room]
    effects: List = field(default_factory=list)
    closed: Optional[str] = None


def _state(room_id: str, room: Room) -> Broadcast:
    return Broadcast(room_id, 'room:state', room.to_dict())


def _create(room_id, room, event: CreateRoom, origin, now_ms) -> Transition:
    previous = [sid for sid in room.order if sid != origin] if room is not None else []
    room = Room(text=event.text, host=origin)
    room.add_player(origin, PlayerState.fresh(event.name))
    effects = [Subscribe(room_id, origin), _state(room_id, room)]
    # Members of a replaced room see the new snapshot (without themselves), then drop off
    effects += [Unsubscribe(room_id, sid) for sid in previous]
    return Transition(room, effects)


def _join(room_id, room: Room, event: JoinRoom, origin, now_ms) -> Transition:
    if room.racing:
        raise RaceAlreadyStarted(room_id)
    room.add_player(origin, PlayerState.fresh(event.name))
    return Transition(room, [Subscribe(room_id, origin), _state(room_id, room)])


def _progress(room_id, room: Room, event: ReportProgress, origin, now_ms) -> Transition:
    player = room.players.get(origin)
    if player is None:
        return Transition(room)
    player.progress = event.progress
    player.wpm = event.wpm
    player.accuracy = event.accuracy
    if event.progress >= 1.0 and not player.finished:
        player.finished = True
        room.mark_finished(origin)
    if room.all_finished():
        room.race_start = None
    return Transition(room, [_state(room_id, room)])


def _ready(room_id, room: Room, event: SetReady, origin, now_ms) -> Transition:
    player = room.players.get(origin)
    if player is not None:
        player.ready = event.ready
    return Transition(room, [_state(room_id, room)])


def _leave(room_id, room: Room, event, origin, now_ms) -> Transition:
    was_host = room.host == origin
    room.remove_player(origin)
    effects = [Unsubscribe(room_id, origin)]

    reason = None
    if not room.players:
        reason = CLOSE_EMPTY
    elif was_host and room.all_finished():
        reason = CLOSE_HOST_LEFT
    if reason:
        logger.info(f"[room-close] room={room_id} reason={reason}")
        effects += [
            Broadcast(room_id, 'room:closed', {'room': room_id, 'reason': reason}),
            CloseChannel(room_id),
        ]
        return Transition(None, effects, closed=reason)

    if was_host:
        room.host = room.earliest_member()
        effects.append(Broadcast(room_id, 'room:host', {'host': room.host}))
    if room.all_finished():
        room.race_start = None
    effects.append(_state(room_id, room))
    return Transition(room, effects)


def _start(room_id, room: Room, event: StartRace, origin, now_ms) -> Transition:
    if room.host != origin:
        raise NotHost('race:start')
    room.race_start = now_ms + RACE_COUNTDOWN_MS
    room.finished_players = []
    for player in room.players.values():
        player.finished = False
    # State first so clients hold the script before the countdown signal
    return Transition(room, [
        _state(room_id, room),
        Broadcast(room_id, 'race:start', {'room': room_id, 'startAt': room.race_start, 'host': room.host}),
    ])


def _reset(room_id, room: Room, event: ResetPlayer, origin, now_ms) -> Transition:
    player = room.players.get(origin)
    if player is not None:
        player.ready = False
        player.finished = False
        player.progress = 0
        player.wpm = 0
        player.accuracy = 0
    room.unmark_finished(origin)
    return Transition(room, [_state(room_id, room)])


def _set_text(room_id, room: Room, event: SetText, origin, now_ms) -> Transition:
    if room.host != origin:
        raise NotHost('room:setText')
    room.text = event.text
    return Transition(room, [_state(room_id, room)])


_HANDLERS: Dict[type, Callable[..., Transition]] = {
    CreateRoom: _create,
    JoinRoom: _join,
    ReportProgress: _progress,
    SetReady: _ready,
    LeaveRoom: _leave,
    Disconnect: _leave,
    StartRace: _start,
    ResetPlayer: _reset,
    SetText: _set_text,
}


def transition(room: Optional[Room], event: RoomEvent, origin: str, now_ms: int) -> Transition:
    """Apply ``event`` from connection ``origin`` to ``room`` (None if absent)."""
    handler = _HANDLERS[type(event)]
    if room is None and not isinstance(event, CreateRoom):
        raise RoomNotFound(event.room)
    return handler(event.room, room.copy() if room is not None else None, event, origin, now_ms)

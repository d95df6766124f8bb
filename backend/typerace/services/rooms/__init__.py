"""Room services: registry, state machine and broadcast dispatch.

Pure room logic lives in ``machine``; the socket handlers in
``typerace.socketio_events`` are the only callers that combine it with the
registry and the dispatcher.
"""

from .dispatcher import Dispatcher
from .machine import RACE_COUNTDOWN_MS, Transition, transition
from .registry import RoomRegistry

__all__ = ['Dispatcher', 'RACE_COUNTDOWN_MS', 'RoomRegistry', 'Transition', 'transition']

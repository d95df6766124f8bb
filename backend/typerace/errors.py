"""Room protocol errors.

Every error is scoped to the event that caused it: the gateway reports it to
the originating connection as ``room:error`` and no room state changes.
"""


class RoomError(Exception):
    """Base class for errors reported back to the originating connection."""

    message = 'Room error'

    def __init__(self, message=None):
        super().__init__(message or self.message)


class RoomNotFound(RoomError):
    message = 'Room not found'

    def __init__(self, room):
        self.room = room
        super().__init__()


class RaceAlreadyStarted(RoomError):
    message = 'Race already started. Please wait for the next round.'

    def __init__(self, room):
        self.room = room
        super().__init__()


class NotHost(RoomError):
    _messages = {
        'race:start': 'Only host can start the race',
        'room:setText': 'Only host can set the script',
    }

    def __init__(self, action):
        self.action = action
        super().__init__(self._messages.get(action, 'Only host can do that'))


class InvalidPayload(RoomError):
    """Inbound message did not match the expected event shape."""

    def __init__(self, event, reason):
        self.event = event
        self.reason = reason
        super().__init__(f"Invalid payload for {event}: {reason}")

from typing import Dict, List, Optional

from typerace.models import Room


class RoomRegistry:
    """Owns every live Room, keyed by room id.

    Not thread-safe on its own: callers hold the gateway's event lock for the
    whole lookup -> transition -> write sequence.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}

    def create(self, room_id: str, room: Room) -> None:
        """Insert or replace the room stored under ``room_id``."""
        self._rooms[room_id] = room

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def delete(self, room_id: str) -> None:
        self._rooms.pop(room_id, None)

    def rooms_with_member(self, sid: str) -> List[str]:
        return [room_id for room_id, room in self._rooms.items() if sid in room.players]

    def clear(self) -> None:
        self._rooms.clear()

    def __contains__(self, room_id) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

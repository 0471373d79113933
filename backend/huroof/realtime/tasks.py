from __future__ import annotations

from threading import Lock

from ..game.models import Room


class RoomTasks:
    """Which room each background task is watching, keyed by room id.

    A room id can be reused once its room expires, so a claim is tied to the
    room object and not only to its id.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._by_room_id: dict[str, Room] = {}

    def claim(self, room: Room) -> bool:
        """True if the caller should start a task for ``room``."""
        with self._lock:
            if self._by_room_id.get(room.id) is room:
                return False
            self._by_room_id[room.id] = room
            return True

    def release(self, room: Room) -> None:
        with self._lock:
            if self._by_room_id.get(room.id) is room:
                del self._by_room_id[room.id]

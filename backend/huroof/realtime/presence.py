from __future__ import annotations

from dataclasses import dataclass
from threading import Lock


@dataclass(frozen=True)
class Membership:
    room_id: str
    player_name: str


class PresenceTracker:
    """Maps a connection id to the player it joined as.

    A registration is made when the connection joins a room, before anything
    can go wrong, so an abrupt disconnect only has to pop it to know which
    player to remove. A graceful leave cancels it.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._by_sid: dict[str, Membership] = {}

    def register(self, sid: str, room_id: str, player_name: str) -> Membership | None:
        """Record ``sid`` as ``player_name`` in ``room_id``; returns the replaced registration."""
        with self._lock:
            previous = self._by_sid.get(sid)
            self._by_sid[sid] = Membership(room_id=room_id, player_name=player_name)
            return previous

    def lookup(self, sid: str) -> Membership | None:
        with self._lock:
            return self._by_sid.get(sid)

    def cancel(self, sid: str) -> Membership | None:
        with self._lock:
            return self._by_sid.pop(sid, None)

"""Subscriber side of the room channel.

The server pushes whole snapshots, not events. A client keeps a
:class:`SnapshotFeed` per room to drop deliveries that arrive out of order and
to notice the moment the buzzer goes from armed to locked, which is when the
presentation layer plays its sound.
"""

from __future__ import annotations

from typing import Callable, Literal, Optional

LockObserver = Callable[[str, Literal["self", "other"]], None]


def buzzer_lock_edge(previous: dict | None, current: dict) -> str | None:
    """Winner name if ``current`` holds a lock that ``previous`` did not."""
    if not current.get("active"):
        return None
    if previous and previous.get("active") and previous.get("lockedAt") == current.get("lockedAt"):
        return None
    # A different lockedAt means a reset and a new lock happened in between.
    return current.get("winnerName")


def _order_key(snapshot: dict) -> tuple[int, int]:
    # Versions restart when an expired room id is reused, so the room's
    # creation time orders incarnations first.
    return snapshot.get("createdAt", 0), snapshot.get("version", 0)


class SnapshotFeed:
    def __init__(self, own_name: str, on_lock: Optional[LockObserver] = None) -> None:
        self.own_name = own_name
        self.on_lock = on_lock
        self.current: dict | None = None

    @property
    def version(self) -> int:
        return self.current["version"] if self.current else 0

    def accept(self, snapshot: dict) -> bool:
        """Apply ``snapshot`` unless it is not newer than what we already hold."""
        previous = self.current
        if previous is not None and _order_key(snapshot) <= _order_key(previous):
            return False

        previous_buzzer = None
        if previous is not None and previous.get("createdAt", 0) == snapshot.get("createdAt", 0):
            previous_buzzer = previous.get("buzzer")
        self.current = snapshot

        winner = buzzer_lock_edge(previous_buzzer, snapshot.get("buzzer") or {})
        if winner is not None and self.on_lock is not None:
            self.on_lock(winner, "self" if winner == self.own_name else "other")
        return True

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from threading import RLock
from typing import Sequence

from ..config import Config
from .connectivity import winning_teams
from .errors import CellNotFound, DuplicateRoomId, NotAuthorized, RoomNotFound
from .hexgrid import generate_grid
from .letters import ARABIC_LETTERS, letter_pool
from .models import BuzzerState, Cell, CellState, Player, Room, Team

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


# Every read and write of a room happens under this lock. It is the single
# serialisation point for concurrent intents, including the buzzer race.
_lock = RLock()
_rooms: dict[str, Room] = {}


@dataclass(frozen=True)
class BuzzResult:
    won: bool
    winner_name: str | None
    locked_at_ms: int
    version: int


def _coin_flip(rng: random.Random | None = None) -> Team:
    return "orange" if (rng or random).random() < 0.5 else "green"


def _touch(room: Room) -> None:
    room.version += 1


def _require_room(room_id: str) -> Room:
    room = _rooms.get(room_id)
    if room is None:
        raise RoomNotFound(room_id)
    return room


def _require_host(room: Room, actor: str) -> None:
    if actor != room.host_name:
        raise NotAuthorized(f"{actor!r} is not the host of room {room.id}")


def _require_cell(room: Room, cell_id: str) -> Cell:
    cell = room.cell(cell_id)
    if cell is None:
        raise CellNotFound(cell_id)
    return cell


def create_room(
    room_id: str,
    host_name: str,
    rows: int | None = None,
    cols: int | None = None,
    letters: Sequence[str] = ARABIC_LETTERS,
    rng: random.Random | None = None,
    sid: str | None = None,
) -> Room:
    if not room_id or not host_name:
        raise ValueError("room id and host name are required")

    rows = rows or Config.GRID_ROWS
    cols = cols or Config.GRID_COLS

    with _lock:
        if room_id in _rooms:
            raise DuplicateRoomId(room_id)

        room = Room(
            id=room_id,
            host_name=host_name,
            rows=rows,
            cols=cols,
            grid=generate_grid(letters, rows, cols, rng),
            created_at_ms=now_ms(),
        )
        room.players[host_name] = Player(name=host_name, team=_coin_flip(rng), sid=sid)
        _touch(room)
        _rooms[room_id] = room

    logger.info("room %s created by %s (%dx%d)", room_id, host_name, rows, cols)
    return room


def get_room(room_id: str) -> Room | None:
    with _lock:
        return _rooms.get(room_id)


def delete_room(room_id: str) -> bool:
    with _lock:
        if room_id in _rooms:
            del _rooms[room_id]
            logger.info("room %s deleted", room_id)
            return True
        return False


def list_rooms() -> list[Room]:
    with _lock:
        return list(_rooms.values())


def join_room(
    room_id: str,
    player_name: str,
    rng: random.Random | None = None,
    sid: str | None = None,
) -> Room:
    """Add ``player_name`` to the roster, replacing any player of that name.

    The entry is owned by ``sid`` from now on, so a cleanup for an older
    connection under the same name no longer touches it.
    """
    if not player_name:
        raise ValueError("player name is required")

    with _lock:
        room = _require_room(room_id)
        # Any join cancels a pending empty-room expiry.
        room.last_empty_at_ms = None
        room.players[player_name] = Player(name=player_name, team=_coin_flip(rng), sid=sid)
        _touch(room)
        team = room.players[player_name].team

    logger.info("%s joined room %s on team %s", player_name, room_id, team)
    return room


def remove_player(room_id: str, player_name: str, sid: str | None = None) -> bool:
    """Drop a player. Unknown rooms and names are ignored.

    With ``sid`` the player is only removed while that connection still owns
    the entry; ownership is checked and the entry dropped in one step.
    """
    with _lock:
        room = _rooms.get(room_id)
        if room is None or player_name not in room.players:
            return False
        if sid is not None and room.players[player_name].sid != sid:
            return False

        del room.players[player_name]
        if not room.players:
            room.last_empty_at_ms = now_ms()
        _touch(room)

    logger.info("%s left room %s", player_name, room_id)
    return True


def set_cell_state(room_id: str, actor: str, cell_id: str, new_state: int) -> Cell:
    state = CellState(new_state)
    with _lock:
        room = _require_room(room_id)
        _require_host(room, actor)
        cell = _require_cell(room, cell_id)
        _apply_cell_state(room, cell, state)
        _touch(room)
        return cell


def cycle_cell(room_id: str, actor: str, cell_id: str) -> Cell:
    with _lock:
        room = _require_room(room_id)
        _require_host(room, actor)
        cell = _require_cell(room, cell_id)
        _apply_cell_state(room, cell, cell.state.next())
        _touch(room)
        return cell


def _apply_cell_state(room: Room, cell: Cell, state: CellState) -> None:
    # Only one cell may be highlighted at a time.
    if state == CellState.HIGHLIGHTED:
        for other in room.grid:
            if other is not cell and other.state == CellState.HIGHLIGHTED:
                other.state = CellState.BLANK
    cell.state = state


def shuffle_letters(
    room_id: str,
    actor: str,
    letters: Sequence[str] = ARABIC_LETTERS,
    rng: random.Random | None = None,
) -> None:
    """Deal fresh letters to every cell and clear the board."""
    with _lock:
        room = _require_room(room_id)
        _require_host(room, actor)
        pool = letter_pool(letters, len(room.grid), rng)
        for cell, letter in zip(room.grid, pool):
            cell.letter = letter
            cell.state = CellState.BLANK
        _touch(room)

    logger.info("room %s letters reshuffled", room_id)


def pick_random_cell(room_id: str, actor: str, rng: random.Random | None = None) -> Cell | None:
    """Highlight a random blank cell. Returns None when none is left."""
    with _lock:
        room = _require_room(room_id)
        _require_host(room, actor)
        available = [c for c in room.grid if c.state == CellState.BLANK]
        if not available:
            return None
        chosen = (rng or random).choice(available)
        _apply_cell_state(room, chosen, CellState.HIGHLIGHTED)
        _touch(room)
        return chosen


def buzz(room_id: str, player_name: str) -> BuzzResult:
    """Compare-and-set on the buzzer: lock it for ``player_name`` iff armed.

    A buzz that finds the buzzer already locked is a stale attempt and leaves
    the lock untouched; it is reported with ``won=False`` rather than raised.
    """
    with _lock:
        room = _require_room(room_id)
        if player_name not in room.players:
            raise NotAuthorized(f"{player_name!r} is not in room {room_id}")
        if player_name == room.host_name:
            raise NotAuthorized("the host does not buzz")

        buzzer = room.buzzer
        if buzzer.active:
            return BuzzResult(False, buzzer.winner_name, buzzer.locked_at_ms, room.version)

        room.buzzer = BuzzerState(active=True, winner_name=player_name, locked_at_ms=now_ms())
        _touch(room)
        result = BuzzResult(True, player_name, room.buzzer.locked_at_ms, room.version)

    logger.info("buzzer in room %s locked by %s", room_id, player_name)
    return result


def reset_buzzer(room_id: str, actor: str) -> BuzzerState:
    with _lock:
        room = _require_room(room_id)
        _require_host(room, actor)
        room.buzzer = BuzzerState()
        _touch(room)
        return room.buzzer


def auto_reset_buzzer_if_due(room_id: str, now: int | None = None, after_sec: int | None = None) -> bool:
    after_sec = Config.BUZZER_AUTO_RESET_SEC if after_sec is None else after_sec
    if after_sec <= 0:
        return False

    now = now_ms() if now is None else now
    with _lock:
        room = _rooms.get(room_id)
        if room is None or not room.buzzer.active:
            return False
        if now - room.buzzer.locked_at_ms < after_sec * 1000:
            return False
        room.buzzer = BuzzerState()
        _touch(room)

    logger.info("buzzer in room %s re-armed after %ss", room_id, after_sec)
    return True


def expire_if_empty(room_id: str, now: int | None = None, ttl_sec: int | None = None) -> bool:
    """Delete the room once its roster has stayed empty for ``ttl_sec``."""
    ttl_sec = Config.EMPTY_ROOM_TTL_SEC if ttl_sec is None else ttl_sec
    now = now_ms() if now is None else now
    with _lock:
        room = _rooms.get(room_id)
        if room is None or room.players:
            return False
        if room.last_empty_at_ms is None:
            room.last_empty_at_ms = now
            return False
        if now - room.last_empty_at_ms < ttl_sec * 1000:
            return False
        return delete_room(room_id)


def winners(room_id: str) -> dict[str, bool]:
    with _lock:
        room = _require_room(room_id)
        return winning_teams(room.grid, room.rows, room.cols)


def room_public_state(room: Room) -> dict:
    """Full snapshot of ``room``, built under the lock so it is never torn."""
    with _lock:
        return {
            "id": room.id,
            "hostName": room.host_name,
            "createdAt": room.created_at_ms,
            "version": room.version,
            "rows": room.rows,
            "cols": room.cols,
            "grid": [
                {
                    "id": c.id,
                    "col": c.coord.col,
                    "row": c.coord.row,
                    "letter": c.letter,
                    "state": int(c.state),
                }
                for c in room.grid
            ],
            "players": {p.name: {"name": p.name, "team": p.team} for p in room.players.values()},
            "buzzer": {
                "active": room.buzzer.active,
                "winnerName": room.buzzer.winner_name,
                "lockedAt": room.buzzer.locked_at_ms,
            },
        }


def room_snapshot(room_id: str) -> dict:
    with _lock:
        return room_public_state(_require_room(room_id))

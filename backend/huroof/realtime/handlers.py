from __future__ import annotations

import functools
import logging
import re
from typing import Any, Callable

from flask import current_app, request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game import service
from ..game.errors import NotAuthorized, RoomError, RoomNotFound, TransportUnavailable
from . import events
from .presence import PresenceTracker
from .tasks import RoomTasks

logger = logging.getLogger(__name__)

presence = PresenceTracker()
_room_tasks = RoomTasks()

_ARABIC_DIGITS = str.maketrans("٠١٢٣٤٥٦٧٨٩۰۱۲۳۴۵۶۷۸۹", "01234567890123456789")


class InvalidPayload(ValueError):
    pass


def normalize_room_id(raw: Any) -> str:
    """Room ids are typed by people; accept Arabic-Indic digits too."""
    return str(raw or "").strip().translate(_ARABIC_DIGITS)


def _validate_room_id(room_id: str) -> bool:
    return re.fullmatch(r"[0-9A-Za-z]{1,12}", room_id) is not None


def _validate_name(name: str) -> bool:
    n = (name or "").strip()
    if not n:
        return False
    if len(n) > 16:
        return False
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        return False
    # No control characters.
    for ch in n:
        if ord(ch) < 32:
            return False
    return True


def _room_id_from(payload: dict) -> str:
    room_id = normalize_room_id(payload.get("roomId"))
    if not _validate_room_id(room_id):
        raise InvalidPayload("roomId")
    return room_id


def _name_from(payload: dict) -> str:
    name = str(payload.get("name", "")).strip()
    if not _validate_name(name):
        raise InvalidPayload("name")
    return name


def _actor(room_id: str) -> str:
    membership = presence.lookup(request.sid)
    if membership is None or membership.room_id != room_id:
        raise NotAuthorized(f"connection is not in room {room_id}")
    return membership.player_name


def _fail(code: str) -> dict:
    emit(events.ROOM_ERROR, {"error": code})
    return {"ok": False, "error": code}


def _intent(handler: Callable[[dict], dict]) -> Callable[[Any], dict]:
    """Turn store and validation failures into an ack and a private room:error."""

    @functools.wraps(handler)
    def wrapper(data=None):
        payload = data if isinstance(data, dict) else {}
        try:
            return handler(payload)
        except RoomError as exc:
            logger.info("%s rejected for %s: %s", handler.__name__, request.sid, exc)
            return _fail(exc.code)
        except (InvalidPayload, ValueError, TypeError) as exc:
            logger.info("%s bad payload from %s: %s", handler.__name__, request.sid, exc)
            return _fail(events.INVALID_PAYLOAD)

    return wrapper


def register_socketio_handlers(socketio: SocketIO) -> None:
    def _broadcast_room_state(room_id: str) -> None:
        room = service.get_room(room_id)
        if not room:
            return

        state = service.room_public_state(room)
        try:
            socketio.emit(events.ROOM_STATE, state, to=room_id)
        except Exception as exc:
            logger.exception("broadcast to room %s failed", room_id)
            raise TransportUnavailable(str(exc)) from exc

    def _safe_broadcast_room_state(room_id: str) -> None:
        # For paths with no client left to tell, e.g. disconnects and timers.
        try:
            _broadcast_room_state(room_id)
        except TransportUnavailable:
            return

    def _ensure_room_task(room_id: str) -> None:
        config = current_app.config
        if config.get("TESTING"):
            return
        room = service.get_room(room_id)
        if room is None or not _room_tasks.claim(room):
            return

        ttl_sec = int(config.get("EMPTY_ROOM_TTL_SEC", 10))
        auto_reset_sec = int(config.get("BUZZER_AUTO_RESET_SEC", 0))
        tick_sec = float(config.get("ROOM_TICK_SEC", 0.25))

        def _runner() -> None:
            # Stops once the room expires or its id is taken by a newer room.
            while service.get_room(room_id) is room:
                now = service.now_ms()

                if service.expire_if_empty(room_id, now=now, ttl_sec=ttl_sec):
                    break

                if service.auto_reset_buzzer_if_due(room_id, now=now, after_sec=auto_reset_sec):
                    _safe_broadcast_room_state(room_id)

                socketio.sleep(tick_sec)

            _room_tasks.release(room)

        socketio.start_background_task(_runner)

    def _leave_current(sid: str) -> None:
        membership = presence.cancel(sid)
        if membership is None:
            return
        leave_room(membership.room_id)
        # A newer connection may own the name by now; then the roster keeps it.
        if service.remove_player(membership.room_id, membership.player_name, sid=sid):
            _safe_broadcast_room_state(membership.room_id)

    def _enter(room_id: str) -> dict:
        join_room(room_id)
        _ensure_room_task(room_id)
        _broadcast_room_state(room_id)
        return {"ok": True, "room": service.room_snapshot(room_id)}

    @socketio.on(events.ROOM_CREATE)
    @_intent
    def room_create(payload):
        room_id = _room_id_from(payload)
        name = _name_from(payload)

        service.create_room(
            room_id,
            name,
            rows=current_app.config.get("GRID_ROWS"),
            cols=current_app.config.get("GRID_COLS"),
            sid=request.sid,
        )
        _leave_current(request.sid)
        presence.register(request.sid, room_id, name)
        return _enter(room_id)

    @socketio.on(events.ROOM_JOIN)
    @_intent
    def room_join(payload):
        room_id = _room_id_from(payload)
        name = _name_from(payload)

        if service.get_room(room_id) is None:
            raise RoomNotFound(room_id)

        membership = presence.lookup(request.sid)
        if membership is not None and (membership.room_id, membership.player_name) != (room_id, name):
            _leave_current(request.sid)

        # Registered before the roster write; dropped again if the join fails.
        presence.register(request.sid, room_id, name)
        try:
            service.join_room(room_id, name, sid=request.sid)
        except RoomError:
            presence.cancel(request.sid)
            raise
        return _enter(room_id)

    @socketio.on(events.ROOM_LEAVE)
    @_intent
    def room_leave(payload):
        room_id = _room_id_from(payload)
        membership = presence.lookup(request.sid)
        if membership is None or membership.room_id != room_id:
            leave_room(room_id)
            return {"ok": True}

        _leave_current(request.sid)
        return {"ok": True}

    @socketio.on(events.CELL_SET)
    @_intent
    def cell_set(payload):
        room_id = _room_id_from(payload)
        cell_id = str(payload.get("cellId", "")).strip()
        state = int(payload.get("state"))

        cell = service.set_cell_state(room_id, _actor(room_id), cell_id, state)
        _broadcast_room_state(room_id)
        return {"ok": True, "cellId": cell.id, "state": int(cell.state)}

    @socketio.on(events.CELL_CYCLE)
    @_intent
    def cell_cycle(payload):
        room_id = _room_id_from(payload)
        cell_id = str(payload.get("cellId", "")).strip()

        cell = service.cycle_cell(room_id, _actor(room_id), cell_id)
        _broadcast_room_state(room_id)
        return {"ok": True, "cellId": cell.id, "state": int(cell.state)}

    @socketio.on(events.GRID_SHUFFLE)
    @_intent
    def grid_shuffle(payload):
        room_id = _room_id_from(payload)

        service.shuffle_letters(room_id, _actor(room_id))
        _broadcast_room_state(room_id)
        return {"ok": True}

    @socketio.on(events.GRID_RANDOM_PICK)
    @_intent
    def grid_random_pick(payload):
        room_id = _room_id_from(payload)

        cell = service.pick_random_cell(room_id, _actor(room_id))
        if cell is None:
            return {"ok": True, "cellId": None}
        _broadcast_room_state(room_id)
        return {"ok": True, "cellId": cell.id}

    @socketio.on(events.BUZZER_BUZZ)
    @_intent
    def buzzer_buzz(payload):
        room_id = _room_id_from(payload)

        result = service.buzz(room_id, _actor(room_id))
        if result.won:
            # Exactly one of these per lock: only the winning compare-and-set gets here.
            socketio.emit(
                events.BUZZER_LOCKED,
                {
                    "roomId": room_id,
                    "winnerName": result.winner_name,
                    "lockedAt": result.locked_at_ms,
                    "version": result.version,
                },
                to=room_id,
            )
            _broadcast_room_state(room_id)
        return {"ok": True, "won": result.won, "winnerName": result.winner_name}

    @socketio.on(events.BUZZER_RESET)
    @_intent
    def buzzer_reset(payload):
        room_id = _room_id_from(payload)

        service.reset_buzzer(room_id, _actor(room_id))
        logger.info("buzzer in room %s reset", room_id)
        _broadcast_room_state(room_id)
        return {"ok": True}

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        _leave_current(request.sid)

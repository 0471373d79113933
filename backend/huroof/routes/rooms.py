from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..game import service
from ..game.errors import RoomNotFound
from ..realtime.handlers import normalize_room_id

bp = Blueprint("rooms", __name__)


@bp.errorhandler(RoomNotFound)
def room_not_found(exc: RoomNotFound):
    current_app.logger.info("room lookup failed: %s", exc)
    return jsonify({"error": exc.code}), 404


@bp.get("/rooms/<code>")
def get_room(code: str):
    return jsonify(service.room_snapshot(normalize_room_id(code)))


@bp.get("/rooms/<code>/winner")
def get_winner(code: str):
    return jsonify(service.winners(normalize_room_id(code)))

from __future__ import annotations


class RoomError(Exception):
    """Base class for failures reported back to the issuing client only."""

    code = "room_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)


class RoomNotFound(RoomError):
    code = "room_not_found"


class DuplicateRoomId(RoomError):
    code = "duplicate_room_id"


class NotAuthorized(RoomError):
    code = "not_authorized"


class CellNotFound(RoomError):
    code = "cell_not_found"


class TransportUnavailable(RoomError):
    code = "transport_unavailable"

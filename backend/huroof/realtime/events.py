from __future__ import annotations

# Client -> server intents
ROOM_CREATE = "room:create"
ROOM_JOIN = "room:join"
ROOM_LEAVE = "room:leave"
CELL_SET = "cell:set"
CELL_CYCLE = "cell:cycle"
GRID_SHUFFLE = "grid:shuffle"
GRID_RANDOM_PICK = "grid:random_pick"
BUZZER_BUZZ = "buzzer:buzz"
BUZZER_RESET = "buzzer:reset"

# Server -> client
ROOM_STATE = "room:state"
ROOM_ERROR = "room:error"
BUZZER_LOCKED = "buzzer:locked"

INVALID_PAYLOAD = "invalid_payload"

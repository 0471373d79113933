import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Empty string lets create_app pick eventlet or threading.
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Board
    GRID_ROWS = int(os.environ.get("GRID_ROWS", "5"))
    GRID_COLS = int(os.environ.get("GRID_COLS", "5"))

    # Room lifecycle
    EMPTY_ROOM_TTL_SEC = int(os.environ.get("EMPTY_ROOM_TTL_SEC", "10"))
    # 0 disables; otherwise a locked buzzer re-arms after this many seconds.
    BUZZER_AUTO_RESET_SEC = int(os.environ.get("BUZZER_AUTO_RESET_SEC", "0"))
    ROOM_TICK_SEC = float(os.environ.get("ROOM_TICK_SEC", "0.25"))

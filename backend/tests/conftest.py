import os
import sys
import pytest

# Ensure the backend root (containing the `huroof` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from huroof.game import service
from huroof.realtime import handlers
from huroof.realtime.presence import PresenceTracker
from huroof.server import create_app


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    CORS_ORIGINS = '*'
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = 'threading'
    GRID_ROWS = 5
    GRID_COLS = 5
    EMPTY_ROOM_TTL_SEC = 10
    BUZZER_AUTO_RESET_SEC = 0
    ROOM_TICK_SEC = 0.25


def _clear_rooms():
    for room in service.list_rooms():
        service.delete_room(room.id)


@pytest.fixture(autouse=True)
def clean_store(monkeypatch):
    _clear_rooms()
    monkeypatch.setattr(handlers, 'presence', PresenceTracker())
    yield
    _clear_rooms()


@pytest.fixture()
def app_and_socketio():
    return create_app(TestConfig)


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(app_and_socketio):
    flask_app, socketio = app_and_socketio
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make

    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass

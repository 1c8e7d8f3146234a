import os
import sys
import pytest

# Ensure the backend root (containing the `bingo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from bingo import create_app, get_registry, socketio
from bingo.services.rooms import Notifier, RoomRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    LOG_LEVEL = 'DEBUG'
    ROOM_IDLE_EXPIRY_SEC = 60
    ROOM_SWEEP_INTERVAL_SEC = 1
    NOTIFY_HOST_LEFT = False


class RecordingNotifier(Notifier):
    """Collects pushes instead of sending them."""

    def __init__(self):
        self.joined = []
        self.left = []
        self.direct = []
        self.broadcasts = []

    def join(self, connection_id, room_id):
        self.joined.append((connection_id, room_id))

    def leave(self, connection_id, room_id):
        self.left.append((connection_id, room_id))

    def to_connection(self, connection_id, event, payload):
        self.direct.append((connection_id, event, payload))

    def to_room(self, room_id, event, payload):
        self.broadcasts.append((room_id, event, payload))

    def sent_to(self, connection_id, event):
        return [p for (cid, ev, p) in self.direct if cid == connection_id and ev == event]


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def registry(notifier):
    return RoomRegistry(notifier=notifier)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def app_registry(flask_app):
    return get_registry(flask_app)


@pytest.fixture()
def sio_factory(flask_app):
    """Build Socket.IO test clients on the default namespace; all are closed on teardown."""
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass

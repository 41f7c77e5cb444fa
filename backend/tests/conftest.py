import os
import sys
import pytest

# Ensure the backend root (containing the `guessroom` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from guessroom import create_app, socketio
from guessroom.services.games import GameRegistry, GameService, TimerHandle


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    CORS_ALLOWED_ORIGINS = ['*']
    SOCKETIO_NAMESPACE = '/'
    ROUND_DURATION_SEC = 60
    ROTATION_DELAY_SEC = 3
    MIN_PLAYERS = 2
    MAX_ATTEMPTS = 3
    POINTS_PER_WIN = 10
    GAME_ID_LENGTH = 6
    GAME_ID_MAX_ATTEMPTS = 20


class ManualScheduler:
    """Collects timers instead of sleeping; tests fire them explicitly."""

    def __init__(self):
        self.scheduled = []

    def call_later(self, game_id, kind, delay, callback):
        handle = TimerHandle(game_id, kind, delay)
        self.scheduled.append((handle, callback))
        return handle

    def armed(self, kind=None):
        return [h for h, _ in self.scheduled if h.active and (kind is None or h.kind == kind)]

    def fire(self, kind=None):
        """Run every due timer of ``kind`` the way the background worker would."""
        fired = 0
        for handle, callback in list(self.scheduled):
            if kind is not None and handle.kind != kind:
                continue
            self.scheduled.remove((handle, callback))
            if handle.cancelled:
                continue
            callback(handle)
            fired += 1
        return fired

    def force(self, handle):
        """Invoke a callback even if its handle was cancelled."""
        for h, callback in self.scheduled:
            if h is handle:
                callback(h)
                return
        raise LookupError(handle)


class RecordingBroadcaster:
    def __init__(self):
        self.updates = []

    def broadcast(self, game):
        self.updates.append(game.to_dict())

    @property
    def last(self):
        return self.updates[-1]


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def registry():
    return GameRegistry()


@pytest.fixture()
def service(registry, broadcaster, scheduler):
    return GameService(registry, broadcaster, scheduler)


@pytest.fixture()
def flask_app(scheduler):
    application = create_app(TestConfig, scheduler=scheduler)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _connect(client_id=None):
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        if client_id is not None:
            test_client.emit('hello', client_id, callback=True)
        test_client.get_received()  # flush
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            test_client.disconnect()
        except Exception:
            pass


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()

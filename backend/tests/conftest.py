import os
import threading
import sys
import pytest

# Ensure the backend root (containing the `tracker` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tracker import create_app, db, socketio
from tracker.services.auth import create_user


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_TOKEN_COOKIE = 'sessionId'
    SESSION_TTL_SEC = 0
    HEARTBEAT_INTERVAL_SEC = 1.0
    CLOSE_SUPERSEDED_CONNECTIONS = False
    CORS_ORIGINS = ['http://localhost:3000']


class FakeClock:
    """Manually advanced clock returning epoch milliseconds."""

    def __init__(self, start=1_700_000_000_000):
        self.now = start

    def advance(self, ms):
        self.now += ms

    def __call__(self):
        return self.now


class FakeChannel:
    def __init__(self, sid, user_id):
        self.sid = sid
        self.user_id = user_id
        self.lock = threading.RLock()
        self.heartbeat = None
        self.sent = []
        self.closed = False

    def send(self, payload):
        self.sent.append(payload)

    def close(self):
        self.closed = True

    def types(self):
        return [p['type'] for p in self.sent]


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import tracker.models  # noqa: F401
        db.create_all()
    # Yielded outside any app context so every request gets a fresh `g`
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def app_ctx(flask_app):
    """App context for tests that call models and services directly."""
    with flask_app.app_context():
        yield flask_app


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def alice(app_ctx):
    return create_user('alice', 'secret')


@pytest.fixture()
def bob(app_ctx):
    return create_user('bob', 'hunter2')


def signup(http_client, username, password='password'):
    res = http_client.post('/signup', json={'username': username, 'password': password})
    assert res.status_code == 201
    return res.get_json()['user']


def frames(sio_client, namespace='/ws'):
    """Protocol frames received on the 'message' event, in order."""
    out = []
    for pkt in sio_client.get_received(namespace):
        if pkt['name'] != 'message':
            continue
        args = pkt['args']
        out.append(args[0] if isinstance(args, list) else args)
    return out


@pytest.fixture()
def connect_ws(flask_app):
    """Open a Socket.IO test connection carrying the given HTTP client's cookies."""
    opened = []

    def _connect(http_client):
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=http_client,
            namespace='/ws'
        )
        opened.append(test_client)
        return test_client

    yield _connect
    for test_client in opened:
        if test_client.is_connected('/ws'):
            test_client.disconnect(namespace='/ws')

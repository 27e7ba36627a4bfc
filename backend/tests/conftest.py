import os
import sys
import pytest

# Ensure the backend root (containing the `sportshub` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from sportshub import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:3000']
    SOCKETIO_NAMESPACE = '/ws'
    ENABLE_POLLING = False
    FOOTBALL_DATA_API_KEY = ''
    WEBRTC_ICE_SERVERS = [{'urls': 'stun:stun.example.org:3478'}]
    SCREEN_SHARE_MAX_VIEWERS_PER_SESSION = 50
    SCREEN_SHARE_SESSION_TIMEOUT_MINUTES = 180
    BCRYPT_LOG_ROUNDS = 4


class FakeTransport:
    """In-memory transport: records every send, fails on demand."""

    def __init__(self):
        self.connected = set()
        self.sent = []
        self.failing = set()

    def connect(self, *connection_ids):
        self.connected.update(connection_ids)

    def drop(self, connection_id):
        self.connected.discard(connection_id)

    def send(self, connection_id, event, payload):
        if connection_id in self.failing:
            raise ConnectionError(f"send to {connection_id} failed")
        self.sent.append((connection_id, event, payload))

    def is_connected(self, connection_id):
        return connection_id in self.connected

    def received(self, connection_id, event=None):
        return [p for (c, e, p) in self.sent if c == connection_id and (event is None or e == event)]

    def events_for(self, connection_id):
        return [e for (c, e, _) in self.sent if c == connection_id]


@pytest.fixture()
def transport():
    return FakeTransport()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import sportshub.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def _connect(flask_app):
    test_client = socketio.test_client(flask_app, namespace='/ws')
    received = test_client.get_received('/ws')
    connected = [pkt for pkt in received if pkt['name'] == 'connected']
    test_client.connection_id = connected[0]['args'][0]['connectionId']
    return test_client


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def factory():
        test_client = _connect(flask_app)
        clients.append(test_client)
        return test_client

    yield factory
    for test_client in clients:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except Exception:
            pass


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()


@pytest.fixture()
def login(client):
    def _login(username='host', password='password'):
        res = client.post('/api/auth/register', json={'username': username, 'password': password})
        if res.status_code == 400:
            res = client.post('/api/auth/login', json={'username': username, 'password': password})
        return res.get_json()['user']
    return _login

import os
import sys
import logging
import pytest

# Ensure the project root (containing the `hijack` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from hijack import create_app, db, socketio
from hijack.services.coordination import Coordinator


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    ROOM_ID_BYTES = 3
    ANALYTICS_ENABLED = True
    SESSION_TTL_SEC = 3600
    LOG_LEVEL = 'DEBUG'


class RecordingNotifier:
    """Collects outbound events instead of sending them."""

    def __init__(self):
        self.sent = []
        self.broadcasts = []

    def send(self, conn_id, event, payload=None):
        self.sent.append((conn_id, event, payload))

    def broadcast(self, event, payload=None):
        self.broadcasts.append((event, payload))

    def events_for(self, conn_id):
        return [(event, payload) for cid, event, payload in self.sent if cid == conn_id]

    def names_for(self, conn_id):
        return [event for event, _ in self.events_for(conn_id)]

    def clear(self):
        self.sent.clear()
        self.broadcasts.clear()


class FakePresence:
    def __init__(self, fail=False):
        self.fail = fail
        self.disconnects = []

    def record_connect(self, conn_id, fingerprint):
        pass

    def record_disconnect(self, conn_id):
        if self.fail:
            raise RuntimeError('presence store unavailable')
        self.disconnects.append(conn_id)

    def snapshot(self):
        return {'currentOnline': 0}


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def presence():
    return FakePresence()


@pytest.fixture()
def coordinator(notifier, presence):
    return Coordinator(notifier, presence=presence, logger=logging.getLogger('hijack.tests'))


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import hijack.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass

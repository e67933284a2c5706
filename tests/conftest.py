import os
import sys
import pytest

# Ensure the project root (containing the `wordrush` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config import Config
from wordrush import create_app, db, socketio
from wordrush.services.words.racks import PRESETS, Rack


class TestConfig(Config):
    __test__ = False
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    REMOTE_DICTIONARY_ENABLED = False
    WORDLIST_PATH = os.path.join(CURRENT_DIR, 'no-such-wordlist.txt')
    DICTIONARY_CACHE_BACKEND = 'memory'
    RACK_POLICY = 'preset'


class ScriptedRacks:
    """Starts every round on РАДИУС and alternates with СТЕКЛО on swap."""

    first = 'РАДИУС'
    second = 'СТЕКЛО'

    def __init__(self):
        self._samples = {p.letters: p.sample_words for p in PRESETS}

    def generate(self, exclude=None):
        letters = self.second if exclude == self.first else self.first
        return Rack(letters, self._samples[letters])

    def swap(self, previous):
        return self.generate(exclude=previous)

    def sample_words_for(self, letters):
        return self._samples.get(letters, ())


def build_test_app(config_class=TestConfig):
    application = create_app(config_class)
    application.extensions['wordrush']['racks'] = ScriptedRacks()
    with application.app_context():
        import wordrush.models  # noqa: F401
        db.create_all()
    return application


@pytest.fixture()
def flask_app():
    application = build_test_app()
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def app_ctx(flask_app):
    with flask_app.app_context():
        yield flask_app


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def register(client, username='alice', password='secret123'):
    res = client.post('/register', json={'username': username, 'password': password})
    assert res.status_code == 201, res.get_json()
    return res.get_json()['user']


@pytest.fixture()
def player(client):
    """A logged-in client plus its user payload."""
    user = register(client)
    return client, user


def update_user(flask_app, user_id, **fields):
    from wordrush.models import User
    with flask_app.app_context():
        user = db.session.get(User, user_id)
        for key, value in fields.items():
            setattr(user, key, value)
        db.session.commit()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


def connect_socket(flask_app, client):
    """Socket.IO client sharing ``client``'s login cookie; log in first."""
    return socketio.test_client(flask_app, flask_test_client=client, namespace='/ws')

import os

import pytest
from flask import Flask

from newsdesk import Newsdesk
from newsdesk.core.config import Config
from newsdesk.core.token_store import TokenStore

from fakes import BASE_URL, FakeTransport


@pytest.fixture(autouse=True)
def isolated_log_db(tmp_path, monkeypatch):
    """Keep the persistent log sink out of the working directory."""
    monkeypatch.setattr(Config, 'LOG_DB', str(tmp_path / 'logs' / 'app_logs.db'))


@pytest.fixture
def tmp_db_dir(tmp_path):
    d = tmp_path / 'databases'
    return str(d)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def store(tmp_db_dir):
    return TokenStore(os.path.join(tmp_db_dir, 'client_state.db'))


@pytest.fixture
def make_app(tmp_db_dir, transport):
    """Factory for fully initialised apps sharing one client-state DB (a "restart")."""
    def _make(validate=True, **overrides):
        app = Flask(__name__)
        app.config['TESTING'] = True
        app.config['SECRET_KEY'] = 'test-secret'
        app.config['API_BASE_URL'] = BASE_URL
        app.config['DB_DIR'] = tmp_db_dir
        app.config['CLIENT_STATE_DB'] = os.path.join(tmp_db_dir, 'client_state.db')
        app.config['LOG_DB'] = os.path.join(tmp_db_dir, 'app_logs.db')
        app.config.update(overrides)
        Newsdesk(app, {'validate_on_startup': validate}, http=transport)
        return app
    return _make


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def newsdesk(app):
    return app.extensions['newsdesk']

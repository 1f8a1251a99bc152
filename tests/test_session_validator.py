"""
Startup validation and staleness re-validation.

The API is a Mock here; the Token Store is real (SQLite in tmp_path).
"""

from unittest.mock import Mock

import pytest

from newsdesk.core.database import Database
from newsdesk.core.errors import (
    MalformedResponse,
    SessionInvalid,
    TransientNetworkError,
    UnauthorizedError,
)
from newsdesk.core.models import UserProfile
from newsdesk.core.token_store import TOKEN_KEY
from newsdesk.modules.auth.session import Session, SessionStatus
from newsdesk.modules.auth.validator import SessionValidator

ANA = UserProfile(name='Ana', email='a@b.com', role='editor', total_favorites=2, total_likes=7)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def api():
    return Mock()


def make_validator(api, store, clock, **kwargs):
    return SessionValidator(api, store, Session(), clock=clock, **kwargs)


# ===== No token =====

def test_no_token_goes_anonymous_without_calling_api(api, store, clock):
    session = make_validator(api, store, clock).validate()

    assert session.status == SessionStatus.ANONYMOUS
    assert session.token is None and session.user is None
    api.current_user.assert_not_called()


# ===== Server confirms =====

def test_confirmed_token_refreshes_profile(api, store, clock):
    store.save('t1', ANA)
    fresh = UserProfile(name='Ana Maria', email='a@b.com', role='editor', total_favorites=3, total_likes=9)
    api.current_user.return_value = fresh

    session = make_validator(api, store, clock).validate()

    api.current_user.assert_called_once_with(token='t1')
    assert session.status == SessionStatus.AUTHENTICATED
    assert session.user == fresh
    assert session.provisional is False
    assert store.load().user == fresh, "Refreshed profile should be persisted"


def test_validation_is_idempotent_across_restarts(api, store, clock):
    store.save('t1', ANA)
    api.current_user.return_value = ANA

    first = make_validator(api, store, clock).validate()
    first_user, first_token = first.user, first.token
    second = make_validator(api, store, clock).validate()

    assert (second.user, second.token) == (first_user, first_token)
    assert store.load().user == ANA


def test_orphan_token_is_completed_from_server(api, store, clock):
    with Database.connect(store.db_path) as conn:
        conn.execute('INSERT INTO client_state (key, value) VALUES (?, ?)', (TOKEN_KEY, '"t1"'))
    api.current_user.return_value = ANA

    session = make_validator(api, store, clock).validate()

    assert session.is_authenticated
    assert store.load().token == 't1'


# ===== Server unreachable or confused =====

@pytest.mark.parametrize('error', [
    TransientNetworkError('connection refused'),
    MalformedResponse('not json'),
])
def test_failure_with_cached_profile_trusts_it_provisionally(api, store, clock, error):
    store.save('t1', ANA)
    api.current_user.side_effect = error

    validator = make_validator(api, store, clock)
    session = validator.validate()

    assert session.status == SessionStatus.AUTHENTICATED
    assert session.user == ANA
    assert session.provisional is True
    assert validator.last_error is error
    assert store.load().user == ANA, "Cached session must be kept"


def test_failure_without_cached_profile_clears_store(api, store, clock):
    with Database.connect(store.db_path) as conn:
        conn.execute('INSERT INTO client_state (key, value) VALUES (?, ?)', (TOKEN_KEY, '"t1"'))
    api.current_user.side_effect = TransientNetworkError('timeout')

    validator = make_validator(api, store, clock)
    session = validator.validate()

    assert session.status == SessionStatus.ANONYMOUS
    assert isinstance(validator.last_error, SessionInvalid)
    assert store.read_token() is None


# ===== Server rejects the token =====

def test_rejected_token_clears_session_when_not_trusted(api, store, clock):
    store.save('t1', ANA)
    api.current_user.side_effect = UnauthorizedError(401, 'jwt expired')

    session = make_validator(api, store, clock, trust_cached_on_reject=False).validate()

    assert session.status == SessionStatus.ANONYMOUS
    assert store.load() is None


def test_rejected_token_falls_back_to_cached_profile_by_default(api, store, clock):
    store.save('t1', ANA)
    api.current_user.side_effect = UnauthorizedError(401, 'jwt expired')

    session = make_validator(api, store, clock).validate()

    assert session.is_authenticated
    assert session.provisional is True
    assert store.load().token == 't1'


# ===== Staleness =====

def test_confirmed_session_never_needs_revalidation(api, store, clock):
    store.save('t1', ANA)
    api.current_user.return_value = ANA
    validator = make_validator(api, store, clock)
    validator.validate()

    clock.now += 10_000
    assert validator.needs_revalidation(900) is False


def test_provisional_session_expires_after_max_staleness(api, store, clock):
    store.save('t1', ANA)
    api.current_user.side_effect = TransientNetworkError('down')
    validator = make_validator(api, store, clock)
    validator.validate()

    clock.now += 899
    assert validator.needs_revalidation(900) is False
    clock.now += 1
    assert validator.needs_revalidation(900) is True


def test_revalidation_failure_past_window_ends_session(api, store, clock):
    store.save('t1', ANA)
    api.current_user.side_effect = TransientNetworkError('down')
    validator = make_validator(api, store, clock)
    validator.validate()

    clock.now += 900
    session = validator.revalidate()

    assert session.status == SessionStatus.ANONYMOUS
    assert store.load() is None


def test_revalidation_success_confirms_session(api, store, clock):
    store.save('t1', ANA)
    api.current_user.side_effect = TransientNetworkError('down')
    validator = make_validator(api, store, clock)
    validator.validate()

    api.current_user.side_effect = None
    api.current_user.return_value = ANA
    clock.now += 900
    session = validator.revalidate()

    assert session.is_authenticated
    assert session.provisional is False
    assert session.validated_at == clock.now

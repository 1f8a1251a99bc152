"""
Auth Service
============

Owns every session transition: startup restore, login, register, logout
and mid-session token rejection. Session-mutating operations run one at a
time; `pending` is exposed so views can refuse a second submission.
"""

import logging
import threading
import time

from flask import current_app, flash, has_request_context

from ...core.errors import (
    ApiError,
    InvalidCredentials,
    MalformedResponse,
    NewsdeskError,
    RegistrationRejected,
)
from ...core.logging_service import LoggingService
from ...core.models import UserProfile
from .session import Session, SessionStatus
from .validator import SessionValidator

logger = logging.getLogger(__name__)


def flash_notifier(message, category='info'):
    """Show a notification to the user when there is one to show it to."""
    # flash() needs a signed cookie session
    if has_request_context() and current_app.secret_key:
        flash(message, category)
    else:
        logger.info('[%s] %s', category, message)


class AuthService:
    def __init__(self, api, store, session=None, notifier=flash_notifier,
                 max_staleness=900, trust_cached_on_reject=True, clock=time.monotonic):
        self.api = api
        self.store = store
        self.session = session if session is not None else Session()
        self.notify = notifier
        self.max_staleness = max_staleness
        self._clock = clock
        self.validator = SessionValidator(api, store, self.session,
                                          trust_cached_on_reject=trust_cached_on_reject,
                                          clock=clock)
        self._lock = threading.RLock()
        self._listeners = []
        self.pending = False

    def add_listener(self, callback):
        """Register callback(session) fired whenever the identity changes."""
        self._listeners.append(callback)

    def _changed(self):
        for callback in self._listeners:
            callback(self.session)

    def restore(self):
        """Run startup validation against the persisted token."""
        with self._lock:
            self.validator.validate()
        self._changed()
        return self.session

    def current(self):
        """The session, re-validated first if provisional trust has expired."""
        if self.validator.needs_revalidation(self.max_staleness):
            with self._lock:
                if self.validator.needs_revalidation(self.max_staleness):
                    was = self.session.user
                    self.validator.revalidate()
                    if self.session.user != was:
                        self._changed()
        return self.session

    def login(self, email, password):
        """
        Exchange credentials for a token and persist the session.

        Raises:
            InvalidCredentials: the server rejected the pair. The session
                and the Token Store are left as they were.
            TransientNetworkError: the server could not be reached.
            MalformedResponse: the server accepted the call but its answer
                carries no usable token or profile.
        """
        with self._lock:
            self.pending = True
            try:
                try:
                    data = self.api.login(email, password)
                    token = data['token']
                    user = self._profile_from_login(data, token)
                except MalformedResponse:
                    self.notify('The server sent an unexpected answer. Please try again.', 'error')
                    raise
                except ApiError as e:
                    if e.status_code >= 500:
                        self.notify('The server could not process the sign-in. Please try again.', 'error')
                        raise
                    LoggingService.log_security_event('Failed login attempt', {
                        'email': email,
                        'error_type': type(e).__name__,
                    })
                    self.notify('Incorrect email or password.', 'error')
                    raise InvalidCredentials('Incorrect email or password.') from e
                except NewsdeskError:
                    self.notify('Could not reach the server. Please try again.', 'error')
                    raise

                self.store.save(token, user)
                self.session.authenticate(token, user, at=self._clock())
            finally:
                self.pending = False

        LoggingService.log_user_action('auth', 'login', user_id=user.email)
        self.notify('Signed in successfully. Welcome back!', 'success')
        self._changed()

    def _profile_from_login(self, data, token):
        """Login answers carry the profile inline; fall back to /auth/me if not."""
        try:
            return UserProfile.from_api(data)
        except MalformedResponse:
            return self.api.current_user(token=token)

    def register(self, name, email, password):
        """
        Create an account. Does not sign in.

        Raises:
            RegistrationRejected: with the server's message.
        """
        with self._lock:
            self.pending = True
            try:
                self.api.register(name, email, password)
            except ApiError as e:
                self.notify(f'Could not create the account: {e.message}', 'error')
                raise RegistrationRejected(e.message) from e
            except NewsdeskError as e:
                self.notify('Could not create the account.', 'error')
                raise RegistrationRejected(str(e)) from e
            finally:
                self.pending = False

        LoggingService.log_user_action('auth', 'register', user_id=email)
        self.notify('Account created! Please sign in to continue.', 'success')

    def logout(self):
        """Forget the session. Idempotent."""
        with self._lock:
            was_authenticated = self.session.token is not None
            email = self.session.user.email if self.session.user is not None else None
            self.store.clear()
            self.session.reset()

        if was_authenticated:
            LoggingService.log_user_action('auth', 'logout', user_id=email)
            self.notify('You have been signed out.', 'info')
            self._changed()

    def handle_unauthorized(self):
        """An authenticated call came back 401: the token is no longer good."""
        with self._lock:
            if self.session.token is None:
                return
            email = self.session.user.email if self.session.user is not None else None
            self.store.clear()
            self.session.reset(SessionStatus.INVALID)

        LoggingService.log_security_event('Token rejected by the API; session cleared',
                                          user_id=email)
        self._changed()

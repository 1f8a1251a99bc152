"""
Session Validator
=================

Reconciles the persisted token/profile with the remote "current user"
endpoint at startup, and re-checks provisionally trusted sessions once
their staleness window runs out.
"""

import logging
import time

from ...core.errors import NewsdeskError, SessionInvalid, UnauthorizedError
from ...core.logging_service import LoggingService
from .session import SessionStatus

logger = logging.getLogger(__name__)


class SessionValidator:
    def __init__(self, api, store, session, trust_cached_on_reject=True, clock=time.monotonic):
        self.api = api
        self.store = store
        self.session = session
        self.trust_cached_on_reject = trust_cached_on_reject
        self._clock = clock
        self.last_error = None

    def validate(self):
        """
        Startup reconciliation.

        No stored token -> anonymous. Otherwise ask the server who the token
        belongs to: success refreshes and persists the profile; a failure
        falls back to the cached profile (provisional trust) or, with no
        profile to fall back on, clears the store and goes anonymous.
        """
        self.last_error = None
        self.session.status = SessionStatus.INITIALIZING

        token = self.store.read_token()
        if not token:
            self.session.reset()
            return self.session

        stored = self.store.load()
        cached_user = stored.user if stored is not None and stored.token == token else None

        try:
            user = self.api.current_user(token=token)
        except UnauthorizedError as e:
            if self.trust_cached_on_reject and cached_user is not None:
                return self._trust_cached(token, cached_user, e)
            return self._invalidate(e)
        except NewsdeskError as e:
            if cached_user is not None:
                return self._trust_cached(token, cached_user, e)
            return self._invalidate(e)

        self.store.save(token, user)
        self.session.authenticate(token, user, at=self._clock())
        logger.info('Session restored for %s', user.email)
        return self.session

    def needs_revalidation(self, max_staleness):
        """True when a provisional session has outlived its trust window."""
        if not self.session.is_authenticated or not self.session.provisional:
            return False
        if max_staleness is None:
            return False
        return self._clock() - self.session.validated_at >= max_staleness

    def revalidate(self):
        """
        Confirm a provisional session with the server. Past the staleness
        window any failure ends the session.
        """
        token = self.session.token
        try:
            user = self.api.current_user(token=token)
        except NewsdeskError as e:
            return self._invalidate(e)
        self.store.save(token, user)
        self.session.authenticate(token, user, at=self._clock())
        return self.session

    def _trust_cached(self, token, cached_user, error):
        self.last_error = error
        self.session.authenticate(token, cached_user, at=self._clock(), provisional=True)
        LoggingService.warning(
            'auth',
            'Session validation failed; trusting cached profile',
            {'error_type': type(error).__name__, 'error': str(error)},
            user_id=cached_user.email,
        )
        return self.session

    def _invalidate(self, error):
        self.last_error = SessionInvalid(str(error))
        self.store.clear()
        self.session.reset()
        LoggingService.log_security_event(
            'Stored session could not be verified and was cleared',
            {'error_type': type(error).__name__, 'error': str(error)},
        )
        return self.session

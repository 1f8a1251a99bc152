"""
Token Store
===========

Durable key-value storage for the client session: a bearer token and the
cached user profile, kept in a SQLite `client_state` table. Both keys are
written and cleared in a single transaction; a token without a profile (or
the reverse) and unreadable JSON are treated as corrupt and cleared on load.
"""

import json
import logging
from collections import namedtuple

from .database import Database
from .errors import MalformedResponse
from .models import UserProfile

logger = logging.getLogger(__name__)

TOKEN_KEY = 'token'
USER_KEY = 'user'

StoredSession = namedtuple('StoredSession', ['token', 'user'])


class TokenStore:
    """Persists `token` and `user` together, never one without the other."""

    def __init__(self, db_path):
        self.db_path = db_path
        Database.ensure_parent_dir(db_path)
        self._init_table()

    def _init_table(self):
        with Database.connect(self.db_path) as conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS client_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')

    def _read_all(self):
        with Database.connect(self.db_path) as conn:
            rows = conn.execute(
                'SELECT key, value FROM client_state WHERE key IN (?, ?)',
                (TOKEN_KEY, USER_KEY)
            ).fetchall()
        return dict(rows)

    def save(self, token, user):
        """Persist token and profile in one transaction."""
        if not token or user is None:
            raise ValueError('token and user must be saved together')
        values = [
            (TOKEN_KEY, json.dumps(token)),
            (USER_KEY, json.dumps(user.to_dict())),
        ]
        with Database.write(self.db_path) as conn:
            conn.executemany('''
                INSERT INTO client_state (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                               updated_at = CURRENT_TIMESTAMP
            ''', values)

    def load(self):
        """
        Return StoredSession(token, user) or None.

        Corrupt state (malformed JSON, an orphaned key, an invalid profile)
        is cleared and reported as absent.
        """
        raw = self._read_all()
        if not raw:
            return None

        try:
            token = json.loads(raw[TOKEN_KEY]) if TOKEN_KEY in raw else None
            user_data = json.loads(raw[USER_KEY]) if USER_KEY in raw else None
            user = UserProfile.from_api(user_data) if user_data is not None else None
        except (ValueError, MalformedResponse) as e:
            logger.warning('Discarding unreadable client state: %s', e)
            self.clear()
            return None

        if not isinstance(token, str) or not token or user is None:
            logger.warning('Discarding incomplete client state (keys: %s)', sorted(raw))
            self.clear()
            return None

        return StoredSession(token, user)

    def read_token(self):
        """
        The stored token alone, even when its profile is missing.
        Used by startup validation, which can rebuild the profile from the server.
        """
        raw = self._read_all()
        if TOKEN_KEY not in raw:
            return None
        try:
            token = json.loads(raw[TOKEN_KEY])
        except ValueError:
            return None
        return token if isinstance(token, str) and token else None

    def clear(self):
        """Remove both keys. Safe to call when already empty."""
        with Database.write(self.db_path) as conn:
            conn.execute('DELETE FROM client_state WHERE key IN (?, ?)', (TOKEN_KEY, USER_KEY))

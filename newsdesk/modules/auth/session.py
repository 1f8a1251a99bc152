from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ...core.models import UserProfile


class SessionStatus(str, Enum):
    INITIALIZING = 'initializing'
    ANONYMOUS = 'anonymous'
    AUTHENTICATED = 'authenticated'
    # The server rejected the token mid-session; treated like anonymous
    INVALID = 'invalid'


@dataclass
class Session:
    """Process-wide client session. Mutated only by the auth service and validator."""

    token: Optional[str] = None
    user: Optional[UserProfile] = None
    status: SessionStatus = SessionStatus.INITIALIZING
    provisional: bool = False
    validated_at: Optional[float] = None

    def authenticate(self, token, user, at, provisional=False):
        if not token or user is None:
            raise ValueError('an authenticated session needs both a token and a user')
        self.token = token
        self.user = user
        self.provisional = provisional
        self.validated_at = at
        self.status = SessionStatus.AUTHENTICATED

    def reset(self, status=SessionStatus.ANONYMOUS):
        self.token = None
        self.user = None
        self.provisional = False
        self.validated_at = None
        self.status = status

    @property
    def is_authenticated(self):
        return self.status == SessionStatus.AUTHENTICATED

    @property
    def role(self):
        return self.user.role if self.user is not None else None

    @property
    def is_admin(self):
        return self.is_authenticated and self.role == 'admin'

    @property
    def is_editor(self):
        return self.is_authenticated and self.role in ('admin', 'editor')

    def to_dict(self):
        """Template/JSON view of the session. Never includes the token."""
        return {
            'status': self.status.value,
            'user': self.user.to_dict() if self.user is not None else None,
            'is_authenticated': self.is_authenticated,
            'is_admin': self.is_admin,
            'is_editor': self.is_editor,
            'provisional': self.provisional,
        }

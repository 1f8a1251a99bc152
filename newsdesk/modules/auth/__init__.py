"""
Newsdesk Auth Module

Client-side authentication against the remote API:
- Session state and startup validation of the persisted token
- Login, registration and logout
- Role-gated access to protected views
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

from .session import Session, SessionStatus
from .validator import SessionValidator
from .service import AuthService, flash_notifier
from .guard import AccessDecision, decide, role_required, login_required, admin_required, editor_required
from . import routes

__all__ = [
    'auth_bp', 'Session', 'SessionStatus', 'SessionValidator', 'AuthService', 'flash_notifier',
    'AccessDecision', 'decide', 'role_required', 'login_required', 'admin_required',
    'editor_required',
]

"""
Access Guard
============

decide() is the pure allow/deny table over (session, required role).
role_required() applies it to a Flask view on every request.
"""

from enum import Enum
from functools import wraps

from flask import current_app, jsonify, redirect, request, url_for

from ...core.logging_service import LoggingService
from .service import flash_notifier
from .session import SessionStatus

ROLES = ('admin', 'editor')

# Roles that satisfy each requirement
ALLOWED_ROLES = {
    'admin': ('admin',),
    'editor': ('admin', 'editor'),
}


class AccessDecision(str, Enum):
    ALLOW = 'allow'
    LOADING = 'loading'
    LOGIN = 'login'
    DENY = 'deny'


def decide(session, required_role=None):
    if required_role is not None and required_role not in ROLES:
        raise ValueError(f'Unknown role requirement: {required_role!r}')

    if session.status == SessionStatus.INITIALIZING:
        return AccessDecision.LOADING
    if session.status != SessionStatus.AUTHENTICATED:
        return AccessDecision.LOGIN
    if required_role is None:
        return AccessDecision.ALLOW
    if session.role in ALLOWED_ROLES[required_role]:
        return AccessDecision.ALLOW
    return AccessDecision.DENY


def _safe_next(target):
    """Only same-site relative paths are remembered for post-login return."""
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return None


def role_required(role=None):
    """Decorator gating a view on the current session and an optional role"""
    if role is not None and role not in ROLES:
        raise ValueError(f'Unknown role requirement: {role!r}')

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            session = current_app.extensions['newsdesk'].auth.current()
            decision = decide(session, role)

            if decision == AccessDecision.ALLOW:
                return f(*args, **kwargs)

            if decision == AccessDecision.LOADING:
                response = jsonify({
                    'success': False,
                    'status': session.status.value,
                    'message': 'Loading session...',
                })
                response.status_code = 503
                response.headers['Retry-After'] = '1'
                return response

            if decision == AccessDecision.LOGIN:
                return redirect(url_for('auth.login', next=_safe_next(request.full_path.rstrip('?'))))

            LoggingService.log_security_event('Access denied', {
                'path': request.path,
                'required_role': role,
                'role': session.role,
            }, user_id=session.user.email if session.user else None)
            flash_notifier('Access denied. You do not have permission to access this area.', 'error')
            return redirect(url_for('news.news_list'))
        return decorated_function
    return decorator


# Shorthands in the style of the usual login_required/admin_required helpers
login_required = role_required()
admin_required = role_required('admin')
editor_required = role_required('editor')

from flask import current_app, jsonify, request, url_for

from ...core.errors import InvalidCredentials, NewsdeskError, RegistrationRejected, ValidationError
from ...core.forms import request_data, text_field
from . import auth_bp
from .guard import _safe_next
from .utils import validate_password_strength


def _auth():
    return current_app.extensions['newsdesk'].auth


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Sign-in: GET reports the session, POST submits credentials"""
    auth = _auth()
    next_page = _safe_next(request.args.get('next'))

    if request.method == 'GET':
        return jsonify({'session': auth.current().to_dict(), 'next': next_page})

    try:
        data = request_data()
        email = text_field(data, 'email').lower()
        password = text_field(data, 'password', strip=False)
    except ValidationError as e:
        return jsonify({'success': False, 'message': str(e)}), 400

    if not email or not password:
        return jsonify({'success': False, 'message': 'Please enter both email and password'}), 400

    if auth.pending:
        return jsonify({'success': False, 'message': 'A sign-in is already in progress'}), 409

    try:
        auth.login(email, password)
    except InvalidCredentials as e:
        return jsonify({'success': False, 'message': str(e), 'form': {'email': email}}), 401
    except NewsdeskError as e:
        return jsonify({'success': False, 'message': str(e), 'form': {'email': email}}), 502

    return jsonify({
        'success': True,
        'session': auth.session.to_dict(),
        'redirect': next_page or url_for('admin.dashboard'),
    })


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    """Register page route"""
    if request.method == 'GET':
        return jsonify({'fields': ['name', 'email', 'password']})

    try:
        data = request_data()
        name = text_field(data, 'name')
        email = text_field(data, 'email').lower()
        password = text_field(data, 'password', strip=False)
        confirm = data.get('confirm_password')
    except ValidationError as e:
        return jsonify({'success': False, 'message': str(e)}), 400
    form = {'name': name, 'email': email}

    # Validate required fields
    if not all([name, email, password]):
        return jsonify({'success': False, 'message': 'All fields are required', 'form': form}), 400

    if not validate_password_strength(password):
        return jsonify({
            'success': False,
            'message': 'Password does not meet requirements',
            'form': form,
        }), 400

    if confirm is not None and confirm != password:
        return jsonify({'success': False, 'message': 'Passwords do not match', 'form': form}), 400

    try:
        _auth().register(name, email, password)
    except RegistrationRejected as e:
        return jsonify({'success': False, 'message': str(e), 'form': form}), 400

    return jsonify({
        'success': True,
        'message': 'Account created! Please sign in to continue.',
        'redirect': url_for('auth.login'),
    })


@auth_bp.route('/logout', methods=['GET', 'POST'])
def logout():
    """Sign out; safe to call when already signed out"""
    _auth().logout()
    return jsonify({'success': True, 'redirect': url_for('auth.login')})


@auth_bp.route('/me')
def me():
    """Current session as seen by the frontend"""
    return jsonify(_auth().current().to_dict())

from flask import current_app, jsonify

from ...core.errors import MutationFailed, ValidationError
from ...core.forms import request_data, text_field
from ..auth.guard import admin_required, editor_required
from ..auth.service import flash_notifier
from . import editors_bp


def _editors():
    return current_app.extensions['newsdesk'].editors


@editors_bp.route('/', methods=['GET'])
@editor_required
def list_editors():
    """Editors are visible to editors too: the article form picks authors from here"""
    return jsonify([e.to_dict() for e in _editors().list_editors()])


@editors_bp.route('/', methods=['POST'])
@admin_required
def register_editor():
    try:
        data = request_data()
        name = text_field(data, 'name')
        email = text_field(data, 'email').lower()
        password = text_field(data, 'password', strip=False)
        role = text_field(data, 'role') or 'editor'
    except ValidationError as e:
        return jsonify({'success': False, 'message': str(e)}), 400

    form = {'name': name, 'email': email, 'role': role}
    try:
        _editors().register_editor(name, email, password, role)
    except ValidationError as e:
        return jsonify({'success': False, 'message': str(e), 'form': form}), 400
    except MutationFailed as e:
        flash_notifier(f'Could not register editor: {e}', 'error')
        return jsonify({'success': False, 'message': str(e), 'form': form}), e.status_code

    flash_notifier(f'Editor {email} registered.', 'success')
    return jsonify({'success': True}), 201

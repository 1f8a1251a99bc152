from flask import current_app, jsonify, request

from ...core.errors import MutationFailed, ValidationError
from ...core.forms import request_data
from ...core.pagination import int_arg, paginate
from ..auth.guard import admin_required
from ..auth.service import flash_notifier
from . import categories_bp


def _categories():
    return current_app.extensions['newsdesk'].categories


@categories_bp.route('/', methods=['GET'])
@admin_required
def list_categories():
    result = _categories().list_categories(search=request.args.get('search') or None)
    per_page = int_arg(request.args.get('per_page'),
                       current_app.config.get('ADMIN_ITEMS_PER_PAGE', 20))
    page = paginate(result['categories'], int_arg(request.args.get('page'), 1), per_page)
    page['items'] = [c.to_dict() for c in page['items']]
    return jsonify(page)


@categories_bp.route('/active', methods=['GET'])
@admin_required
def active_categories():
    return jsonify([c.to_dict() for c in _categories().active_categories()])


@categories_bp.route('/<category_id>', methods=['GET'])
@admin_required
def get_category(category_id):
    category = _categories().get_category(category_id)
    if category is None:
        return jsonify({'success': False, 'message': 'Category not found'}), 404
    return jsonify(category.to_dict())


@categories_bp.route('/', methods=['POST'])
@admin_required
def create_category():
    try:
        data = request_data()
    except ValidationError as e:
        return jsonify({'success': False, 'message': str(e)}), 400

    try:
        category = _categories().create_category(data)
    except ValidationError as e:
        return jsonify({'success': False, 'message': str(e), 'form': data}), 400
    except MutationFailed as e:
        flash_notifier(f'Error creating category: {e}', 'error')
        return jsonify({'success': False, 'message': str(e), 'form': data}), e.status_code

    flash_notifier('Category created successfully.', 'success')
    return jsonify({'success': True, 'category': category.to_dict()}), 201


@categories_bp.route('/<category_id>', methods=['PUT'])
@admin_required
def update_category(category_id):
    try:
        data = request_data()
    except ValidationError as e:
        return jsonify({'success': False, 'message': str(e)}), 400

    try:
        category = _categories().update_category(category_id, data)
    except ValidationError as e:
        return jsonify({'success': False, 'message': str(e), 'form': data}), 400
    except MutationFailed as e:
        flash_notifier(f'Error updating category: {e}', 'error')
        return jsonify({'success': False, 'message': str(e), 'form': data}), e.status_code

    flash_notifier('Category updated successfully.', 'success')
    return jsonify({'success': True, 'category': category.to_dict()})


@categories_bp.route('/<category_id>', methods=['DELETE'])
@admin_required
def delete_category(category_id):
    try:
        _categories().delete_category(category_id)
    except MutationFailed as e:
        flash_notifier(f'Error deleting category: {e}', 'error')
        return jsonify({'success': False, 'message': str(e)}), e.status_code

    flash_notifier('Category deleted.', 'success')
    return jsonify({'success': True})

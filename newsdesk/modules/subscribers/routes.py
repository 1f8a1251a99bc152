"""
Subscribers Routes
==================

Provides:
- POST /api/newsletter/subscribe -- public signup
- GET /admin/newsletter/ -- subscription table (?search&page&per_page)
- GET /admin/newsletter/stats -- totals by status
- GET /admin/newsletter/<id> -- one subscription
- PUT /admin/newsletter/<id> -- change status/name/email
- DELETE /admin/newsletter/<id> -- remove a subscription
"""

import logging

from flask import current_app, jsonify, request

from ...core.errors import MutationFailed, ValidationError
from ...core.forms import request_data, text_field
from ...core.pagination import int_arg, paginate
from ..auth.guard import admin_required
from ..auth.service import flash_notifier
from . import subscribers_bp, subscribers_admin_bp

logger = logging.getLogger(__name__)


def _newsletter():
    return current_app.extensions['newsdesk'].newsletter


@subscribers_bp.route('/subscribe', methods=['POST'])
def subscribe():
    """Public newsletter signup"""
    try:
        data = request_data()
        email = text_field(data, 'email').lower()
        name = text_field(data, 'name')
    except ValidationError as e:
        return jsonify({'success': False, 'message': str(e)}), 400

    try:
        _newsletter().subscribe(email, name)
    except ValidationError as e:
        return jsonify({'success': False, 'message': str(e), 'form': {'email': email, 'name': name}}), 400
    except MutationFailed as e:
        logger.warning('Newsletter signup failed for %s: %s', email, e)
        flash_notifier('Could not subscribe right now. Please try again.', 'error')
        return jsonify({'success': False, 'message': str(e), 'form': {'email': email, 'name': name}}), e.status_code

    flash_notifier('Thanks for subscribing!', 'success')
    return jsonify({'success': True, 'message': 'Subscribed successfully'}), 201


@subscribers_admin_bp.route('/', methods=['GET'])
@admin_required
def list_subscriptions():
    result = _newsletter().list_subscriptions(search=request.args.get('search') or None)
    per_page = int_arg(request.args.get('per_page'),
                       current_app.config.get('ADMIN_ITEMS_PER_PAGE', 20))
    page = paginate(result['subscriptions'], int_arg(request.args.get('page'), 1), per_page)
    page['items'] = [s.to_dict() for s in page['items']]
    return jsonify(page)


@subscribers_admin_bp.route('/stats', methods=['GET'])
@admin_required
def stats():
    return jsonify(_newsletter().newsletter_stats().to_dict())


@subscribers_admin_bp.route('/<subscription_id>', methods=['GET'])
@admin_required
def get_subscription(subscription_id):
    subscription = _newsletter().get_subscription(subscription_id)
    if subscription is None:
        return jsonify({'success': False, 'message': 'Subscription not found'}), 404
    return jsonify(subscription.to_dict())


@subscribers_admin_bp.route('/<subscription_id>', methods=['PUT'])
@admin_required
def update_subscription(subscription_id):
    try:
        data = request_data()
    except ValidationError as e:
        return jsonify({'success': False, 'message': str(e)}), 400

    try:
        subscription = _newsletter().update_subscription(subscription_id, data)
    except ValidationError as e:
        return jsonify({'success': False, 'message': str(e), 'form': data}), 400
    except MutationFailed as e:
        flash_notifier(f'Error updating subscription: {e}', 'error')
        return jsonify({'success': False, 'message': str(e), 'form': data}), e.status_code

    flash_notifier('Subscription updated.', 'success')
    return jsonify({'success': True, 'subscription': subscription.to_dict()})


@subscribers_admin_bp.route('/<subscription_id>', methods=['DELETE'])
@admin_required
def delete_subscription(subscription_id):
    try:
        _newsletter().delete_subscription(subscription_id)
    except MutationFailed as e:
        flash_notifier(f'Error deleting subscription: {e}', 'error')
        return jsonify({'success': False, 'message': str(e)}), e.status_code

    flash_notifier('Subscription removed.', 'success')
    return jsonify({'success': True})

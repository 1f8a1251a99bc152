"""
Admin Dashboard Routes
======================
"""

from flask import current_app, jsonify, redirect, request, url_for

from ...core.errors import MutationFailed
from ..auth.guard import admin_required
from ..auth.service import flash_notifier
from . import dashboard_bp


def _dashboard():
    return current_app.extensions['newsdesk'].dashboard


@dashboard_bp.route('/')
@admin_required
def dashboard():
    """Main admin dashboard"""
    service = _dashboard()
    session = current_app.extensions['newsdesk'].auth.session
    return jsonify({
        'user': session.user.to_dict(),
        'stats': service.admin_stats(),
        'top_articles': service.top_articles(),
    })


@dashboard_bp.route('/login')
def login():
    """Admin login alias"""
    return redirect(url_for('auth.login', next=request.args.get('next') or url_for('admin.dashboard')))


@dashboard_bp.route('/view-stats')
@admin_required
def view_stats():
    return jsonify([
        {
            'article_id': s.article_id,
            'count': s.count,
            'likes': s.likes,
            'bookmarks': s.bookmarks,
            'comments': s.comments,
            'last_updated': s.last_updated,
        }
        for s in _dashboard().view_stats()
    ])


@dashboard_bp.route('/refresh-stats', methods=['POST'])
@admin_required
def refresh_stats():
    try:
        _dashboard().refresh_stats()
    except MutationFailed as e:
        flash_notifier(f'Error refreshing stats: {e}', 'error')
        return jsonify({'success': False, 'message': str(e)}), e.status_code

    flash_notifier('Stats refreshed.', 'success')
    return jsonify({'success': True})

"""
News Admin Routes
=================

JSON endpoints behind the article table and the article form.
Editors and admins only.
"""

from flask import current_app, jsonify, request

from ...core.errors import MutationFailed, ValidationError
from ...core.forms import request_data
from ...core.pagination import int_arg, paginate
from ..auth.guard import editor_required
from ..auth.service import flash_notifier
from . import news_bp


def _articles():
    return current_app.extensions['newsdesk'].articles


def _failure(message, status, form=None):
    body = {'success': False, 'message': message}
    if form is not None:
        # Hand the submitted values back so nothing typed is lost
        body['form'] = form
    return jsonify(body), status


@news_bp.route('/', methods=['GET'])
@editor_required
def list_articles():
    """Article table: ?page&per_page&search&category&author"""
    per_page = int_arg(request.args.get('per_page'),
                       current_app.config.get('ADMIN_ITEMS_PER_PAGE', 20))
    result = _articles().list_articles(
        page=1,
        limit=1000,
        search=request.args.get('search') or None,
        category=request.args.get('category') or None,
        author=request.args.get('author') or None,
    )
    page = paginate(result['articles'], int_arg(request.args.get('page'), 1), per_page)
    page['items'] = [a.to_dict() for a in page['items']]
    return jsonify(page)


@news_bp.route('/<article_id>', methods=['GET'])
@editor_required
def get_article(article_id):
    article = _articles().get_article(article_id)
    if article is None:
        return _failure('Article not found', 404)
    return jsonify(article.to_dict())


@news_bp.route('/', methods=['POST'])
@editor_required
def create_article():
    try:
        data = request_data()
    except ValidationError as e:
        return _failure(str(e), 400)

    try:
        article = _articles().create_article(data)
    except ValidationError as e:
        return _failure(str(e), 400, data)
    except MutationFailed as e:
        flash_notifier(f'Error creating article: {e}', 'error')
        return _failure(str(e), e.status_code, data)

    flash_notifier('Article created successfully.', 'success')
    return jsonify({'success': True, 'article': article.to_dict()}), 201


@news_bp.route('/<article_id>', methods=['PUT'])
@editor_required
def update_article(article_id):
    try:
        data = request_data()
    except ValidationError as e:
        return _failure(str(e), 400)

    try:
        article = _articles().update_article(article_id, data)
    except ValidationError as e:
        return _failure(str(e), 400, data)
    except MutationFailed as e:
        flash_notifier(f'Error updating article: {e}', 'error')
        return _failure(str(e), e.status_code, data)

    flash_notifier('Article updated successfully.', 'success')
    return jsonify({'success': True, 'article': article.to_dict()})


@news_bp.route('/<article_id>', methods=['DELETE'])
@editor_required
def delete_article(article_id):
    try:
        _articles().delete_article(article_id)
    except MutationFailed as e:
        flash_notifier(f'Error deleting article: {e}', 'error')
        return _failure(str(e), e.status_code)

    flash_notifier('Article deleted.', 'success')
    return jsonify({'success': True})

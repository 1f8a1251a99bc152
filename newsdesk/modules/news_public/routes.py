from flask import Blueprint, current_app, jsonify, request

from ...core.pagination import int_arg, paginate
from ..news.service import matches_article

news_public_bp = Blueprint('news', __name__, url_prefix='/news')


def _newsdesk():
    return current_app.extensions['newsdesk']


@news_public_bp.route('/')
def news_list():
    """Public news listing - only shows published articles (?search&category&page)"""
    per_page = int_arg(request.args.get('per_page'), current_app.config.get('ARTICLES_PER_PAGE', 20))
    articles = _newsdesk().articles.published_articles(page=1, limit=1000)

    search = (request.args.get('search') or '').strip()
    category = request.args.get('category')
    articles = [a for a in articles if matches_article(a, search=search, category=category)]

    # Featured ("detached") articles lead the front page
    featured = [a.to_dict() for a in articles if a.is_detach][:3]
    page = paginate(articles, int_arg(request.args.get('page'), 1), per_page)
    page['items'] = [a.to_dict() for a in page['items']]
    page['featured'] = featured
    return jsonify(page)


@news_public_bp.route('/<article_id>')
def article_detail(article_id):
    """Individual article - only shows published articles"""
    article = _newsdesk().articles.get_article(article_id)
    if article is None or not article.is_published:
        return jsonify({'success': False, 'message': 'Article not found'}), 404

    related = [
        a.to_dict() for a in _newsdesk().articles.published_articles(page=1, limit=1000)
        if a.id != article.id and a.category == article.category
    ][:3]
    return jsonify({'article': article.to_dict(), 'related_articles': related})


@news_public_bp.route('/categories')
def categories():
    """Active categories for the public navigation"""
    return jsonify([c.to_dict() for c in _newsdesk().categories.active_categories()])


# API Routes - Public endpoint only
@news_public_bp.route('/api/articles', methods=['GET'])
def get_articles():
    """Get published articles API - public endpoint"""
    page = int_arg(request.args.get('page'), 1)
    limit = int_arg(request.args.get('limit'), 20)
    return jsonify([a.to_dict() for a in _newsdesk().articles.published_articles(page, limit)])

"""
Article Service
===============

Cached article reads and cache-invalidating article writes.
The remote API only paginates, so search/category/author filters are
applied here, on the fetched page.
"""

from datetime import datetime, timezone

from ...core.errors import ValidationError
from ...core.forms import text_field
from ...core.models import ARTICLE_STATUSES
from ...core.query_cache import make_key

KIND = 'articles'
# Dashboard aggregates derived from articles
DERIVED_KINDS = ('admin-stats', 'top-articles')

# form field -> API field
_FIELDS = {
    'title': 'title',
    'summary': 'summary',
    'content': 'content',
    'category': 'category',
    'author': 'author',
    'status': 'status',
    'tags': 'tags',
    'image_url': 'imageUrl',
    'is_detach': 'isDetach',
    'publish_date': 'publishDate',
}


def _parse_tags(value):
    if isinstance(value, str):
        value = value.split(',')
    if not isinstance(value, list):
        raise ValidationError('Tags must be a list')
    tags = []
    for tag in value:
        tag = str(tag).strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def article_payload(data, partial=False):
    """
    Translate submitted form data into the API's article body.

    Accepts both the snake_case form names and the API's camelCase names.
    With partial=True (updates) only the submitted fields are sent.
    """
    if not isinstance(data, dict):
        raise ValidationError('Article data must be an object')
    payload = {}
    for form_name, api_name in _FIELDS.items():
        if form_name in data:
            payload[api_name] = data[form_name]
        elif api_name in data:
            payload[api_name] = data[api_name]

    if not partial or 'title' in payload:
        title = text_field(payload, 'title')
        if not title:
            raise ValidationError('Title is required')
        payload['title'] = title

    if 'status' in payload or not partial:
        status = payload.get('status') or 'draft'
        if status not in ARTICLE_STATUSES:
            raise ValidationError(f'Status must be one of: {", ".join(ARTICLE_STATUSES)}')
        payload['status'] = status

    if 'tags' in payload:
        payload['tags'] = _parse_tags(payload['tags'])
    elif not partial:
        payload['tags'] = []

    if 'isDetach' in payload:
        value = payload['isDetach']
        if isinstance(value, str):
            value = value.lower() in ('1', 'true', 'on', 'yes')
        payload['isDetach'] = bool(value)
    elif not partial:
        payload['isDetach'] = False

    if not partial and not payload.get('publishDate'):
        payload['publishDate'] = datetime.now(timezone.utc).isoformat()

    return payload


def matches_article(article, search=None, category=None, author=None):
    """Search hits title, summary or any tag; 'all' disables a filter."""
    if search:
        needle = search.lower()
        fields = [article.title, article.summary] + list(article.tags)
        if not any(needle in (value or '').lower() for value in fields):
            return False
    if category and category != 'all' and article.category != category:
        return False
    if author and author != 'all' and article.author != author:
        return False
    return True


class ArticleService:
    def __init__(self, api, cache):
        self.api = api
        self.cache = cache

    def list_articles(self, page=1, limit=20, search=None, category=None, author=None):
        """Returns {'articles': [...], 'total': n}; empty on fetch failure."""
        key = make_key(KIND, page=page, limit=limit, search=search or None,
                       category=category or None, author=author or None)

        def fetch():
            articles = self.api.get_articles(page, limit)
            matching = [a for a in articles if matches_article(a, search, category, author)]
            return {'articles': matching, 'total': len(matching)}

        return self.cache.query(key, fetch, default={'articles': [], 'total': 0})

    def published_articles(self, page=1, limit=20):
        result = self.list_articles(page=page, limit=limit)
        return [a for a in result['articles'] if a.is_published]

    def get_article(self, article_id):
        return self.cache.query(make_key(KIND, id=str(article_id)),
                                lambda: self.api.get_article(article_id))

    def create_article(self, data):
        payload = article_payload(data)
        return self.cache.mutate(KIND, lambda: self.api.create_article(payload),
                                 also=DERIVED_KINDS)

    def update_article(self, article_id, data):
        payload = article_payload(data, partial=True)
        return self.cache.mutate(KIND, lambda: self.api.update_article(article_id, payload),
                                 also=DERIVED_KINDS)

    def delete_article(self, article_id):
        return self.cache.mutate(KIND, lambda: self.api.delete_article(article_id),
                                 also=DERIVED_KINDS)

"""
API Models
==========

Typed snapshots of the entities the remote API returns. Every payload is
parsed here, at the client boundary, so a malformed response fails with
MalformedResponse instead of leaking missing fields into the views.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Optional

from .errors import MalformedResponse

USER_ROLES = ('admin', 'editor', 'user')
EDITOR_ROLES = ('admin', 'editor')
ARTICLE_STATUSES = ('draft', 'published')
SUBSCRIPTION_STATUSES = ('active', 'inactive', 'unsubscribed')


def _expect_dict(data, what):
    if not isinstance(data, dict):
        raise MalformedResponse(f'Expected {what} object, got {type(data).__name__}')
    return data


def _id(data, what):
    """Servers send either `id` or `_id`; both are normalized to str."""
    value = data.get('id', data.get('_id'))
    if value is None or value == '':
        raise MalformedResponse(f'{what} is missing its id')
    return str(value)


def _str(data, key, what, required=False, default=''):
    value = data.get(key)
    if value is None:
        if required:
            raise MalformedResponse(f'{what} is missing "{key}"')
        return default
    if not isinstance(value, str):
        raise MalformedResponse(f'{what}.{key} must be a string')
    return value


def _int(data, key, what, default=0):
    value = data.get(key, default)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedResponse(f'{what}.{key} must be a number')
    return int(value)


def _bool(data, key, default=False):
    value = data.get(key, default)
    return bool(value) if value is not None else default


def _choice(data, key, choices, what, default=None):
    value = data.get(key, default)
    if value not in choices:
        raise MalformedResponse(f'{what}.{key} must be one of {", ".join(choices)}, got {value!r}')
    return value


def _name_of(value):
    """Related entities arrive either as a plain string or as {name: ...}."""
    if isinstance(value, dict):
        return value.get('name') or value.get('id') or ''
    return value or ''


@dataclass(frozen=True)
class UserProfile:
    name: str
    email: str
    role: str
    avatar: Optional[str] = None
    total_favorites: int = 0
    total_likes: int = 0
    id: Optional[str] = None

    @classmethod
    def from_api(cls, data):
        data = _expect_dict(data, 'user')
        return cls(
            name=_str(data, 'name', 'user'),
            email=_str(data, 'email', 'user', required=True),
            role=_choice(data, 'role', USER_ROLES, 'user'),
            avatar=data.get('avatar') or None,
            total_favorites=_int(data, 'total_favorites', 'user'),
            total_likes=_int(data, 'total_likes', 'user'),
            id=str(data['id']) if data.get('id') is not None else None,
        )

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class Article:
    id: str
    title: str
    summary: str = ''
    content: str = ''
    category: str = ''
    author: str = ''
    status: str = 'draft'
    tags: List[str] = field(default_factory=list)
    image_url: str = ''
    is_detach: bool = False
    publish_date: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    slug: str = ''

    @classmethod
    def from_api(cls, data):
        data = _expect_dict(data, 'article')
        tags = data.get('tags') or []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise MalformedResponse('article.tags must be a list of strings')
        return cls(
            id=_id(data, 'article'),
            title=_str(data, 'title', 'article', required=True),
            summary=_str(data, 'summary', 'article'),
            content=_str(data, 'content', 'article'),
            category=_name_of(data.get('category')),
            author=_name_of(data.get('author')),
            status=_choice(data, 'status', ARTICLE_STATUSES, 'article', default='draft'),
            tags=list(tags),
            image_url=_str(data, 'imageUrl', 'article'),
            is_detach=_bool(data, 'isDetach'),
            publish_date=data.get('publishDate'),
            created_at=data.get('createdAt'),
            updated_at=data.get('updatedAt'),
            slug=_str(data, 'slug', 'article'),
        )

    @property
    def is_published(self):
        return self.status == 'published'

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    description: str = ''
    active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    slug: str = ''

    @classmethod
    def from_api(cls, data):
        data = _expect_dict(data, 'category')
        return cls(
            id=_id(data, 'category'),
            name=_str(data, 'name', 'category', required=True),
            description=_str(data, 'description', 'category'),
            active=_bool(data, 'active', default=True),
            created_at=data.get('createdAt'),
            updated_at=data.get('updatedAt'),
            slug=_str(data, 'slug', 'category'),
        )

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class Editor:
    id: str
    name: str
    email: str
    role: str
    avatar: Optional[str] = None
    status: str = 'active'
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, data):
        data = _expect_dict(data, 'editor')
        return cls(
            id=_id(data, 'editor'),
            name=_str(data, 'name', 'editor', required=True),
            email=_str(data, 'email', 'editor', required=True),
            role=_choice(data, 'role', EDITOR_ROLES, 'editor'),
            avatar=data.get('avatar') or None,
            status=_str(data, 'status', 'editor', default='active'),
            created_at=data.get('createdAt'),
            updated_at=data.get('updatedAt'),
        )

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class NewsletterSubscription:
    id: str
    name: str
    email: str
    status: str = 'active'
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, data):
        data = _expect_dict(data, 'subscription')
        return cls(
            id=_id(data, 'subscription'),
            name=_str(data, 'name', 'subscription'),
            email=_str(data, 'email', 'subscription', required=True),
            status=_choice(data, 'status', SUBSCRIPTION_STATUSES, 'subscription', default='active'),
            created_at=data.get('createdAt'),
            updated_at=data.get('updatedAt'),
        )

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class NewsletterStats:
    total: int = 0
    active: int = 0
    inactive: int = 0
    unsubscribed: int = 0

    @classmethod
    def from_api(cls, data):
        data = _expect_dict(data, 'newsletter stats')
        return cls(
            total=_int(data, 'total', 'newsletter stats'),
            active=_int(data, 'active', 'newsletter stats'),
            inactive=_int(data, 'inactive', 'newsletter stats'),
            unsubscribed=_int(data, 'unsubscribed', 'newsletter stats'),
        )

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class ViewStats:
    article_id: str
    count: int = 0
    likes: int = 0
    bookmarks: int = 0
    comments: int = 0
    last_updated: Optional[str] = None

    @classmethod
    def from_api(cls, data):
        data = _expect_dict(data, 'view stats')
        article_id = data.get('articleId')
        if article_id is None:
            raise MalformedResponse('view stats is missing "articleId"')
        return cls(
            article_id=str(article_id),
            count=_int(data, 'count', 'view stats'),
            likes=_int(data, 'likes', 'view stats'),
            bookmarks=_int(data, 'bookmarks', 'view stats'),
            comments=_int(data, 'comments', 'view stats'),
            last_updated=data.get('lastUpdated'),
        )


def parse_list(payload, model):
    """Parse a JSON array of entities; anything else is malformed."""
    if not isinstance(payload, list):
        raise MalformedResponse(f'Expected a list of {model.__name__}, got {type(payload).__name__}')
    return [model.from_api(item) for item in payload]

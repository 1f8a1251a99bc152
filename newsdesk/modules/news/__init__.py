"""
News Admin Module
=================

Admin interface for news/blog article management.
Plugs into the admin dashboard module.

Provides:
- Article listing with search, category and author filters
- Article creation and editing
- Draft/publish workflow
"""

from flask import Blueprint

news_bp = Blueprint(
    'news_admin',
    __name__,
    url_prefix='/admin/articles',
)

from .service import ArticleService, article_payload
from . import routes

__all__ = ['news_bp', 'ArticleService', 'article_payload']

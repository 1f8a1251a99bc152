"""
Categories Module
=================

Admin management of article categories:
- Searchable, paginated category table
- Create, edit, activate/deactivate and delete categories
"""

from flask import Blueprint

categories_bp = Blueprint(
    'categories',
    __name__,
    url_prefix='/admin/categories',
)

from .service import CategoryService, category_payload
from . import routes

__all__ = ['categories_bp', 'CategoryService', 'category_payload']

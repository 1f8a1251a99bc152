"""
Editors Module
==============

Admin view of the newsroom staff:
- List editors and admins (also feeds the article author picker)
- Register a new editor account
"""

from flask import Blueprint

editors_bp = Blueprint('editors', __name__, url_prefix='/admin/editors')

from .service import EditorService
from . import routes

__all__ = ['editors_bp', 'EditorService']

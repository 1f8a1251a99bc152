"""
Newsdesk - A Flask frontend for a news portal API
=================================================

A client of a remote news/blog REST API with:
- Token-based sign-in with a persisted, startup-validated session
- Role-gated admin views for articles, categories, editors and newsletter
- A keyed query cache invalidated by every successful write
- A public reading surface for published articles

Usage:
    from newsdesk import Newsdesk

    app = Flask(__name__)
    Newsdesk(app)
"""

__version__ = '0.1.0'

from .framework import Newsdesk

__all__ = ['Newsdesk']

"""
Dashboard Module
================

Admin dashboard interface for Newsdesk.

Provides:
- Dashboard totals (articles, categories, newsletter)
- Top articles by views, likes and bookmarks
- Stats refresh

This is the foundation module the other admin features plug into.
"""

from flask import Blueprint

# Note: Blueprint name is 'admin' so the other modules can link to admin.dashboard
dashboard_bp = Blueprint(
    'admin',
    __name__,
    url_prefix='/admin',
)

from .stats import DashboardService
from . import routes

__all__ = ['dashboard_bp', 'DashboardService']

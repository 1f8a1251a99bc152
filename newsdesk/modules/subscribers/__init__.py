"""
Subscribers Module
==================

Provides:
- Public API for newsletter signups
- Admin subscription table with search, status changes and removal
- Subscription stats for the dashboard
"""

from flask import Blueprint

subscribers_bp = Blueprint('subscribers', __name__, url_prefix='/api/newsletter')

subscribers_admin_bp = Blueprint('subscribers_admin', __name__, url_prefix='/admin/newsletter')

from .service import NewsletterService, is_valid_email
from . import routes

__all__ = ['subscribers_bp', 'subscribers_admin_bp', 'NewsletterService', 'is_valid_email']

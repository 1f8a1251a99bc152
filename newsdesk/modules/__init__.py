"""
Newsdesk Modules
================

Flask blueprint modules for the public site and the admin dashboard.
"""

__all__ = ['auth', 'categories', 'dashboard', 'editors', 'news', 'news_public', 'subscribers']

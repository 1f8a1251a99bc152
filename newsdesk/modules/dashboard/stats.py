"""
Dashboard Statistics
====================

Aggregates behind the admin dashboard: totals, per-article view stats and
the most viewed/liked/bookmarked rankings. Every aggregate is a cached read
that degrades to zeros or empty lists when the API is unavailable.
"""

import logging

from ...core.errors import NewsdeskError
from ...core.models import NewsletterStats
from ...core.query_cache import make_key

logger = logging.getLogger(__name__)

STATS_KIND = 'admin-stats'
VIEWS_KIND = 'view-stats'
TOP_KIND = 'top-articles'

EMPTY_STATS = {
    'total_articles': 0,
    'total_categories': 0,
    'newsletter': NewsletterStats().to_dict(),
}


class DashboardService:
    def __init__(self, api, cache):
        self.api = api
        self.cache = cache

    def admin_stats(self):
        def fetch():
            articles = self.api.get_articles(1, 1000)
            categories = self.api.get_active_categories()
            try:
                newsletter = self.api.get_newsletter_stats()
            except NewsdeskError as e:
                # Older API builds do not expose newsletter stats
                logger.info('Newsletter stats not available: %s', e)
                newsletter = NewsletterStats()
            return {
                'total_articles': len(articles),
                'total_categories': len(categories),
                'newsletter': newsletter.to_dict(),
            }

        return self.cache.query(make_key(STATS_KIND), fetch, default=dict(EMPTY_STATS))

    def view_stats(self):
        return self.cache.query(make_key(VIEWS_KIND), self.api.get_view_stats, default=[])

    def top_articles(self, limit=5):
        """Rank articles by views, likes and bookmarks."""
        empty = {'most_viewed': [], 'most_liked': [], 'most_bookmarked': []}

        # Straight to the API: a failed read must fail the whole ranking
        def fetch():
            stats = {s.article_id: s for s in self.api.get_view_stats()}
            if not stats:
                return empty
            rows = []
            for article in self.api.get_articles(1, 1000):
                s = stats.get(article.id)
                rows.append({
                    'id': article.id,
                    'title': article.title,
                    'author': article.author or 'Unknown author',
                    'category': article.category or 'Uncategorized',
                    'views': s.count if s else 0,
                    'likes': s.likes if s else 0,
                    'bookmarks': s.bookmarks if s else 0,
                    'created_at': article.created_at,
                })
            return {
                'most_viewed': sorted(rows, key=lambda r: r['views'], reverse=True)[:limit],
                'most_liked': sorted(rows, key=lambda r: r['likes'], reverse=True)[:limit],
                'most_bookmarked': sorted(rows, key=lambda r: r['bookmarks'], reverse=True)[:limit],
            }

        return self.cache.query(make_key(TOP_KIND, limit=limit), fetch, default=empty)

    def refresh_stats(self):
        """Ask the API to recompute view stats, then drop the derived caches."""
        return self.cache.mutate(VIEWS_KIND, self.api.refresh_view_stats,
                                 also=(TOP_KIND, STATS_KIND))

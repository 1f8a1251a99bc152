import re

from ...core.errors import ValidationError
from ...core.forms import text_field
from ...core.models import NewsletterStats, SUBSCRIPTION_STATUSES
from ...core.query_cache import make_key

KIND = 'newsletter-subscriptions'

# Rejects consecutive dots and leading or trailing dots
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9_%+-]+(\.[a-zA-Z0-9_%+-]+)*@[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}$')


def is_valid_email(email):
    return bool(email) and bool(EMAIL_REGEX.match(email))


class NewsletterService:
    def __init__(self, api, cache):
        self.api = api
        self.cache = cache

    def subscribe(self, email, name=''):
        """Public signup. Validates the address before calling the API."""
        email = (email or '').strip().lower()
        if not is_valid_email(email):
            raise ValidationError('Please enter a valid email address')
        return self.cache.mutate(KIND, lambda: self.api.subscribe_newsletter(email, (name or '').strip()),
                                 also=('admin-stats',))

    def list_subscriptions(self, search=None):
        """Returns {'subscriptions': [...], 'total': n}; empty on fetch failure."""
        def fetch():
            subscriptions = self.api.get_newsletter_subscriptions()
            if search:
                needle = search.lower()
                subscriptions = [
                    s for s in subscriptions
                    if needle in s.name.lower() or needle in s.email.lower()
                ]
            return {'subscriptions': subscriptions, 'total': len(subscriptions)}

        return self.cache.query(make_key(KIND, search=search or None), fetch,
                                default={'subscriptions': [], 'total': 0})

    def get_subscription(self, subscription_id):
        return self.cache.query(make_key(KIND, id=str(subscription_id)),
                                lambda: self.api.get_newsletter_subscription(subscription_id))

    def newsletter_stats(self):
        return self.cache.query(make_key(KIND, stats=True), self.api.get_newsletter_stats,
                                default=NewsletterStats())

    def update_subscription(self, subscription_id, data):
        if not isinstance(data, dict):
            raise ValidationError('Subscription data must be an object')
        payload = {}
        if 'status' in data:
            if data['status'] not in SUBSCRIPTION_STATUSES:
                raise ValidationError(f'Status must be one of: {", ".join(SUBSCRIPTION_STATUSES)}')
            payload['status'] = data['status']
        if 'name' in data:
            payload['name'] = text_field(data, 'name')
        if 'email' in data:
            email = text_field(data, 'email').lower()
            if not is_valid_email(email):
                raise ValidationError('Please enter a valid email address')
            payload['email'] = email
        if not payload:
            raise ValidationError('Nothing to update')
        return self.cache.mutate(KIND, lambda: self.api.update_subscription(subscription_id, payload),
                                 also=('admin-stats',))

    def delete_subscription(self, subscription_id):
        return self.cache.mutate(KIND, lambda: self.api.delete_subscription(subscription_id),
                                 also=('admin-stats',))

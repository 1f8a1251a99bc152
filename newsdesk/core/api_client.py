"""
Remote API Client
=================

Thin requests-based client for the news portal REST API. Every call goes
through ApiClient.request(), which attaches the bearer token of the shared
Session, maps transport failures and non-2xx answers onto the error
taxonomy in errors.py, and hands JSON bodies to the typed parsers in
models.py.
"""

import logging

import requests

from .errors import ApiError, MalformedResponse, TransientNetworkError, UnauthorizedError
from .logging_service import LoggingService
from .models import (
    Article,
    Category,
    Editor,
    NewsletterStats,
    NewsletterSubscription,
    UserProfile,
    ViewStats,
    parse_list,
)

logger = logging.getLogger(__name__)


def _error_message(resp):
    """Best-effort human message from an error response."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ('message', 'error', 'detail'):
            if body.get(key):
                return str(body[key])
    text = (resp.text or '').strip()
    return text or f'HTTP error! status: {resp.status_code}'


def _unwrap(payload, key):
    """Accept both `{...}` and `{key: {...}}` envelopes."""
    if isinstance(payload, dict) and isinstance(payload.get(key), dict):
        return payload[key]
    return payload


class ApiClient:
    """Client for the remote news portal API."""

    def __init__(self, base_url, session=None, timeout=15, http=None,
                 current_user_path='/auth/me', on_unauthorized=None):
        self.base_url = base_url.rstrip('/')
        self.session = session
        self.timeout = timeout
        self.http = http if http is not None else requests.Session()
        self.current_user_path = current_user_path
        self.on_unauthorized = on_unauthorized

    def _headers(self, token):
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }
        if token:
            headers['Authorization'] = f'Bearer {token}'
        return headers

    def request(self, method, endpoint, payload=None, params=None, auth=True, token=None):
        """
        Perform one HTTP call and return the decoded JSON body.

        Args:
            method: HTTP verb
            endpoint: path relative to base_url, e.g. "/articles"
            payload: JSON body
            params: query string parameters
            auth: attach the session's bearer token
            token: explicit token overriding the session's (startup validation)

        Raises:
            TransientNetworkError: no answer from the server
            UnauthorizedError: 401 on a request that carried a token
            ApiError: any other non-2xx status
            MalformedResponse: 2xx with a body that is not JSON
        """
        explicit_token = token is not None
        if not explicit_token and auth and self.session is not None:
            token = self.session.token
        sent_token = bool(token)

        url = f'{self.base_url}{endpoint}'
        try:
            resp = self.http.request(
                method,
                url,
                headers=self._headers(token if sent_token else None),
                json=payload,
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            LoggingService.warning('api_client', f'{method} {endpoint} failed: {e}')
            raise TransientNetworkError(f'{method} {endpoint} failed: {e}') from e

        logger.debug('%s %s -> %s', method, endpoint, resp.status_code)

        if resp.status_code >= 400:
            message = _error_message(resp)
            LoggingService.log_api_call('api_client', endpoint, method, resp.status_code,
                                        {'message': message})
            if resp.status_code == 401:
                if sent_token and not explicit_token and self.on_unauthorized is not None:
                    self.on_unauthorized()
                raise UnauthorizedError(resp.status_code, message)
            raise ApiError(resp.status_code, message)

        if resp.status_code == 204 or not resp.content:
            return {}

        try:
            return resp.json()
        except ValueError as e:
            raise MalformedResponse(f'{method} {endpoint} returned a non-JSON body') from e

    def get(self, endpoint, **kwargs):
        return self.request('GET', endpoint, **kwargs)

    def post(self, endpoint, payload=None, **kwargs):
        return self.request('POST', endpoint, payload=payload, **kwargs)

    def put(self, endpoint, payload=None, **kwargs):
        return self.request('PUT', endpoint, payload=payload, **kwargs)

    def delete(self, endpoint, **kwargs):
        return self.request('DELETE', endpoint, **kwargs)

    # ===== Auth =====

    def login(self, email, password):
        """Returns the raw login payload: {token, ...user fields}."""
        data = self.post('/auth/login', {'email': email, 'password': password}, auth=False)
        if not isinstance(data, dict) or not isinstance(data.get('token'), str) or not data['token']:
            raise MalformedResponse('Login response is missing "token"')
        return data

    def register(self, name, email, password):
        return self.post('/auth/register', {'name': name, 'email': email, 'password': password},
                         auth=False)

    def current_user(self, token=None):
        """Fetch the profile behind a token; `{user: {...}}` or a bare profile."""
        data = self.get(self.current_user_path, token=token)
        return UserProfile.from_api(_unwrap(data, 'user'))

    # ===== Editors =====

    def get_editors(self):
        return parse_list(self.get('/auth/editors'), Editor)

    def register_editor(self, name, email, password, role='editor'):
        return self.post('/auth/register/editor', {
            'name': name,
            'email': email,
            'password': password,
            'role': role,
        })

    # ===== Articles =====

    def get_articles(self, page=1, limit=10):
        return parse_list(self.get('/articles', params={'page': page, 'limit': limit}), Article)

    def get_article(self, article_id):
        return Article.from_api(_unwrap(self.get(f'/articles/{article_id}'), 'article'))

    def create_article(self, data):
        return Article.from_api(_unwrap(self.post('/articles', data), 'article'))

    def update_article(self, article_id, data):
        return Article.from_api(_unwrap(self.put(f'/articles/{article_id}', data), 'article'))

    def delete_article(self, article_id):
        return self.delete(f'/articles/{article_id}')

    # ===== Categories =====

    def get_categories(self):
        return parse_list(self.get('/categories'), Category)

    def get_active_categories(self):
        return parse_list(self.get('/categories/active'), Category)

    def get_category(self, category_id):
        return Category.from_api(_unwrap(self.get(f'/categories/{category_id}'), 'category'))

    def create_category(self, data):
        return Category.from_api(_unwrap(self.post('/categories', data), 'category'))

    def update_category(self, category_id, data):
        return Category.from_api(_unwrap(self.put(f'/categories/{category_id}', data), 'category'))

    def delete_category(self, category_id):
        return self.delete(f'/categories/{category_id}')

    # ===== Newsletter =====

    def subscribe_newsletter(self, email, name):
        return self.post('/newsletter-subscriptions/subscribe', {'email': email, 'name': name},
                         auth=False)

    def get_newsletter_subscriptions(self):
        return parse_list(self.get('/newsletter-subscriptions'), NewsletterSubscription)

    def get_newsletter_subscription(self, subscription_id):
        data = self.get(f'/newsletter-subscriptions/{subscription_id}')
        return NewsletterSubscription.from_api(_unwrap(data, 'subscription'))

    def get_newsletter_stats(self):
        return NewsletterStats.from_api(self.get('/newsletter-subscriptions/stats'))

    def update_subscription(self, subscription_id, data):
        resp = self.put(f'/newsletter-subscriptions/{subscription_id}', data)
        return NewsletterSubscription.from_api(_unwrap(resp, 'subscription'))

    def delete_subscription(self, subscription_id):
        return self.delete(f'/newsletter-subscriptions/{subscription_id}')

    # ===== Views =====

    def get_view_stats(self):
        return parse_list(self.get('/views'), ViewStats)

    def refresh_view_stats(self):
        return self.post('/views/refresh')

"""
Newsdesk Flask extension.

    app = Flask(__name__)
    newsdesk = Newsdesk(app)

Builds the client-side stack (token store, API client, query cache, auth
service and the resource services), validates the persisted session and
registers every module blueprint.
"""

import logging
import os

from flask import jsonify

from .core.api_client import ApiClient
from .core.config import Config
from .core.database import Database
from .core.logging_service import LoggingService
from .core.query_cache import QueryCache
from .core.token_store import TokenStore
from .modules.auth import AuthService, Session, auth_bp
from .modules.categories import CategoryService, categories_bp
from .modules.dashboard import DashboardService, dashboard_bp
from .modules.editors import EditorService, editors_bp
from .modules.news import ArticleService, news_bp
from .modules.news_public import news_public_bp
from .modules.subscribers import NewsletterService, subscribers_admin_bp, subscribers_bp

logger = logging.getLogger(__name__)

# app.config key -> Config attribute used when the app does not set it
_CONFIG_DEFAULTS = (
    'API_BASE_URL',
    'REQUEST_TIMEOUT',
    'CURRENT_USER_PATH',
    'DB_DIR',
    'CLIENT_STATE_DB',
    'LOG_DB',
    'QUERY_STALE_AFTER',
    'SESSION_MAX_STALENESS',
    'TRUST_CACHED_ON_REJECT',
    'ARTICLES_PER_PAGE',
    'ADMIN_ITEMS_PER_PAGE',
    'BRAND_NAME',
    'LOG_RETENTION_DAYS',
)

BLUEPRINTS = (
    auth_bp,
    dashboard_bp,
    news_bp,
    news_public_bp,
    categories_bp,
    editors_bp,
    subscribers_bp,
    subscribers_admin_bp,
)


class Newsdesk:
    def __init__(self, app=None, config=None, http=None):
        """
        Args:
            app: Flask app to initialise immediately
            config: dict of overrides ({'validate_on_startup': False, ...})
            http: requests.Session-like transport for the API client
        """
        self._config = dict(config or {})
        self._http = http
        self._registered = []
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        for key in _CONFIG_DEFAULTS:
            app.config.setdefault(key, getattr(Config, key))
        if not app.config.get('SECRET_KEY') and Config.SECRET_KEY:
            app.config['SECRET_KEY'] = Config.SECRET_KEY

        self._setup_database_dir(app)

        self.session = Session()
        self.store = TokenStore(app.config['CLIENT_STATE_DB'])
        self.api = ApiClient(
            app.config['API_BASE_URL'],
            session=self.session,
            timeout=app.config['REQUEST_TIMEOUT'],
            http=self._http,
            current_user_path=app.config['CURRENT_USER_PATH'],
        )
        self.cache = QueryCache(stale_after=app.config['QUERY_STALE_AFTER'])
        self.auth = AuthService(
            self.api,
            self.store,
            session=self.session,
            max_staleness=app.config['SESSION_MAX_STALENESS'],
            trust_cached_on_reject=app.config['TRUST_CACHED_ON_REJECT'],
        )
        self.api.on_unauthorized = self.auth.handle_unauthorized
        # Cached reads belong to whoever was signed in when they were fetched
        self.auth.add_listener(lambda session: self.cache.clear())

        self.articles = ArticleService(self.api, self.cache)
        self.categories = CategoryService(self.api, self.cache)
        self.editors = EditorService(self.api, self.cache)
        self.newsletter = NewsletterService(self.api, self.cache)
        self.dashboard = DashboardService(self.api, self.cache)

        self._register_blueprints(app)
        self._register_context_processor(app)
        app.add_url_rule('/health', 'health', self._health)

        app.extensions['newsdesk'] = self

        if self._config.get('validate_on_startup', True):
            with app.app_context():
                self.auth.restore()
                LoggingService.info('system', f'Newsdesk started; session {self.session.status.value}')
                LoggingService.cleanup_old_logs(app.config['LOG_RETENTION_DAYS'])

    def _setup_database_dir(self, app):
        os.makedirs(app.config['DB_DIR'], exist_ok=True)
        for key in ('CLIENT_STATE_DB', 'LOG_DB'):
            Database.ensure_parent_dir(app.config[key])

    def _register_blueprints(self, app):
        for bp in BLUEPRINTS:
            if bp.name in app.blueprints:
                continue
            app.register_blueprint(bp)
            self._registered.append(bp.name)

    def _register_context_processor(self, app):
        @app.context_processor
        def inject_newsdesk():
            return {
                'newsdesk_session': self.session.to_dict(),
                'brand_name': app.config.get('BRAND_NAME') or 'Newsdesk',
            }

    def _health(self):
        checks = {'session': self.session.status.value}
        status = 'ok'
        try:
            self.store.read_token()
            checks['client_state'] = 'ok'
        except Exception as e:
            LoggingService.log_error_with_traceback('health', e)
            checks['client_state'] = f'error: {e}'
            status = 'critical'
        checks['api_base_url'] = self.api.base_url
        return jsonify({'status': status, 'checks': checks}), 200 if status == 'ok' else 503

    def get_registered_modules(self):
        return list(self._registered)

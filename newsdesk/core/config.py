import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """
    Base configuration for the Newsdesk frontend.
    Every value can be overridden through the environment or app.config.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')
    BRAND_NAME = os.getenv('NEWSDESK_BRAND_NAME', 'Newsdesk')

    # Remote API
    API_BASE_URL = os.getenv('NEWSDESK_API_BASE_URL', 'http://localhost:3001/api')
    REQUEST_TIMEOUT = float(os.getenv('NEWSDESK_REQUEST_TIMEOUT', '15'))
    # Some deployments expose the "who am I" endpoint as /private/me
    CURRENT_USER_PATH = os.getenv('NEWSDESK_CURRENT_USER_PATH', '/auth/me')

    # Get DB_DIR from environment, or use a default if not set
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))

    # Durable client state (token + cached profile) and persistent logs
    CLIENT_STATE_DB = os.getenv('CLIENT_STATE_DB', os.path.join(DB_DIR, 'client_state.db'))
    LOG_DB = os.getenv('LOG_DB', os.path.join(DB_DIR, 'app_logs.db'))
    LOG_RETENTION_DAYS = int(os.getenv('LOG_RETENTION_DAYS', '30'))

    # Query cache: seconds before a cached read is refetched
    QUERY_STALE_AFTER = int(os.getenv('NEWSDESK_QUERY_STALE_AFTER', '300'))

    # Seconds a cached profile may be trusted without a successful validation
    SESSION_MAX_STALENESS = int(os.getenv('NEWSDESK_SESSION_MAX_STALENESS', '900'))

    # Apply the cached-profile fallback to 401 answers from /auth/me too;
    # the trust still ends after SESSION_MAX_STALENESS
    TRUST_CACHED_ON_REJECT = os.getenv('NEWSDESK_TRUST_CACHED_ON_REJECT', '1') == '1'

    # Pagination
    ARTICLES_PER_PAGE = int(os.getenv('NEWSDESK_ARTICLES_PER_PAGE', '20'))
    ADMIN_ITEMS_PER_PAGE = int(os.getenv('NEWSDESK_ADMIN_ITEMS_PER_PAGE', '20'))

    # Port for local server
    port = int(os.getenv('PORT', '5000'))


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val is not None:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val is not None:
        return val
    return os.getenv(key, default)

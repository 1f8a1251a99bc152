"""
Newsdesk Core
=============

Core utilities shared by the Newsdesk modules: configuration, persistence,
logging, the remote API client and the query cache.
"""

from .config import Config, get_config_value
from .database import Database
from .logging_service import LoggingService
from .api_client import ApiClient
from .query_cache import QueryCache, make_key
from .token_store import TokenStore, StoredSession

__all__ = [
    'Config', 'get_config_value', 'Database', 'LoggingService',
    'ApiClient', 'QueryCache', 'make_key', 'TokenStore', 'StoredSession',
]

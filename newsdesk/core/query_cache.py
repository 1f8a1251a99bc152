"""
Query Cache
===========

Keyed request cache for remote reads, with coarse invalidation on writes.

Keys are `(kind, params)` tuples built with make_key(). A read is served
from the cache until it is older than `stale_after` seconds or its kind has
been invalidated by a successful mutation. Failed reads degrade to a default
value; failed writes raise MutationFailed and leave the cache untouched,
except for writes the server accepted but answered with an unreadable body.
"""

import itertools
import logging
import threading
import time

from .errors import MalformedResponse, MutationFailed, NewsdeskError
from .logging_service import LoggingService

logger = logging.getLogger(__name__)


def make_key(kind, **params):
    """Build a hashable cache key; params set to None are left out."""
    return (kind, tuple(sorted((k, v) for k, v in params.items() if v is not None)))


class _Entry:
    __slots__ = ('value', 'stored_at')

    def __init__(self, value, stored_at):
        self.value = value
        self.stored_at = stored_at


class _Flight:
    """One in-flight fetch, shared by every caller asking for the same key."""

    def __init__(self, generation, epoch):
        self.generation = generation
        self.epoch = epoch
        self.done = threading.Event()
        self.ok = False
        self.value = None


class QueryCache:
    def __init__(self, stale_after=300, clock=time.monotonic):
        self.stale_after = stale_after
        self._clock = clock
        self._lock = threading.Lock()
        self._entries = {}
        self._flights = {}
        self._latest = {}
        self._epochs = {}
        self._generations = itertools.count(1)

    def _is_fresh(self, entry):
        if self.stale_after is None:
            return True
        return self._clock() - entry.stored_at < self.stale_after

    def query(self, key, fetcher, default=None, force=False):
        """
        Return the cached value for `key`, fetching it when missing or stale.

        Concurrent callers for the same key share one fetch. A fetch that
        fails with a NewsdeskError yields `default` and caches nothing. A
        result is only stored if no newer fetch for the key and no
        invalidation of its kind started while it was running.
        """
        kind = key[0]
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not force and self._is_fresh(entry):
                return entry.value

            epoch = self._epochs.get(kind, 0)
            flight = self._flights.get(key)
            owner = flight is None or force or flight.epoch != epoch
            if owner:
                flight = _Flight(next(self._generations), epoch)
                self._flights[key] = flight
                self._latest[key] = flight.generation

        if not owner:
            flight.done.wait()
            return flight.value if flight.ok else default

        try:
            value = fetcher()
        except NewsdeskError as e:
            logger.warning('Query %r failed: %s', key, e)
            LoggingService.warning('query_cache', f'Query {kind} failed: {e}',
                                   {'key': repr(key), 'error_type': type(e).__name__})
            return default
        else:
            flight.value = value
            flight.ok = True
            with self._lock:
                current = (self._latest.get(key) == flight.generation
                           and self._epochs.get(kind, 0) == flight.epoch)
                if current:
                    self._entries[key] = _Entry(value, self._clock())
                else:
                    logger.debug('Discarding superseded result for %r', key)
            return value
        finally:
            with self._lock:
                if self._flights.get(key) is flight:
                    del self._flights[key]
            flight.done.set()

    def mutate(self, kind, operation, also=()):
        """
        Run a write and invalidate every cached read of `kind` (and of each
        kind in `also`). On failure raise MutationFailed; the cache is kept
        unless the server answered 2xx with a body that could not be parsed.
        """
        try:
            result = operation()
        except MalformedResponse as e:
            # The write went through; only its answer is unreadable
            self.invalidate(kind, *also)
            LoggingService.warning('query_cache', f'Mutation on {kind} returned a malformed answer: {e}',
                                   {'error_type': type(e).__name__})
            raise MutationFailed(kind, e) from e
        except NewsdeskError as e:
            LoggingService.warning('query_cache', f'Mutation on {kind} failed: {e}',
                                   {'error_type': type(e).__name__})
            raise MutationFailed(kind, e) from e
        self.invalidate(kind, *also)
        return result

    def invalidate(self, *kinds):
        """Mark every entry of the given kinds stale, whatever its params."""
        with self._lock:
            for kind in kinds:
                self._epochs[kind] = self._epochs.get(kind, 0) + 1
            for key in [k for k in self._entries if k[0] in kinds]:
                del self._entries[key]
        logger.debug('Invalidated %s', ', '.join(kinds))

    def clear(self):
        """Drop everything; in-flight fetches will not be stored."""
        with self._lock:
            for kind in {k[0] for k in list(self._entries) + list(self._flights)}:
                self._epochs[kind] = self._epochs.get(kind, 0) + 1
            self._entries.clear()

    def peek(self, key):
        """Cached value for `key` without fetching, or None."""
        with self._lock:
            entry = self._entries.get(key)
            return entry.value if entry is not None else None

    def __contains__(self, key):
        with self._lock:
            return key in self._entries

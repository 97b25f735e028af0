"""
Small in-process result cache with a fixed expiry.

Aggregations over report rows are cached under keyed prefixes
('compliance:', 'summary:', ...) and dropped whenever reports or classes
change.
"""

import logging
import threading
import time

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 120


class TTLCache:
    """Key -> value store whose entries expire ``ttl`` seconds after being set."""

    def __init__(self, ttl=DEFAULT_TTL_SECONDS, clock=time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl:
                del self._entries[key]
                return None
            return entry

    def set(self, key, value):
        with self._lock:
            self._entries[key] = (value, self._clock())

    def get_or_set(self, key, fetcher, force_refresh=False):
        """Return the cached value for key, calling fetcher() on a miss."""
        if not force_refresh:
            entry = self.get(key)
            if entry is not None:
                return entry[0]
        value = fetcher()
        self.set(key, value)
        return value

    def invalidate(self, prefix=None):
        """Drop entries whose key starts with prefix, or everything."""
        with self._lock:
            if prefix is None:
                count = len(self._entries)
                self._entries.clear()
            else:
                keys = [k for k in self._entries if k.startswith(prefix)]
                for key in keys:
                    del self._entries[key]
                count = len(keys)
        if count:
            logger.debug("Invalidated %d cached entries (prefix=%r)", count, prefix)
        return count

    def __len__(self):
        return len(self._entries)


report_cache = TTLCache()


def configure_cache(app):
    """Apply REPORT_CACHE_SECONDS and start from an empty cache."""
    report_cache.ttl = app.config.get('REPORT_CACHE_SECONDS', DEFAULT_TTL_SECONDS)
    report_cache.invalidate()


def get_cached(key, fetcher, force_refresh=False):
    return report_cache.get_or_set(key, fetcher, force_refresh=force_refresh)


def invalidate(prefix=None):
    return report_cache.invalidate(prefix)


def invalidate_report_aggregates():
    """Called after any write that changes report rows or the class list."""
    for prefix in ('compliance:', 'summary:', 'absentees:', 'dashboard:'):
        report_cache.invalidate(prefix)

#!/usr/bin/env python3
# scripts/utils/result_cache.py
"""
In-memory result cache for callers that re-run the pipeline on every interaction.
The pipeline functions themselves hold no state; memoization lives here.
"""
import json
import logging
import time
from datetime import datetime

logger = logging.getLogger(__name__)


def _default_serializer(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if hasattr(value, "value"):
        return value.value
    if isinstance(value, (set, frozenset, tuple)):
        return sorted(value, key=str)
    raise TypeError(f"Cannot build cache key from {type(value).__name__}")


class ResultCache:
    """
    Size-bounded cache with per-entry expiry.
    """
    DEFAULT_TTL = 3600       # seconds
    DEFAULT_MAX_SIZE = 100

    def __init__(self, max_size=DEFAULT_MAX_SIZE, default_ttl=DEFAULT_TTL, clock=time.monotonic):
        self.max_size = max_size
        self.default_ttl = default_ttl
        self.clock = clock
        self._entries = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def generate_key(prefix, params):
        """Key from a prefix and parameters, independent of parameter order."""
        parts = [f"{key}:{json.dumps(params[key], default=_default_serializer, sort_keys=True)}"
                 for key in sorted(params)]
        return f"{prefix}:{'|'.join(parts)}"

    def _live_entry(self, key):
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() > entry["expires_at"]:
            del self._entries[key]
            return None
        return entry

    def get(self, key):
        entry = self._live_entry(key)
        if entry is None:
            self.misses += 1
            return None
        self.hits += 1
        return entry["data"]

    def has(self, key):
        return self._live_entry(key) is not None

    def set(self, key, data, ttl=None):
        now = self.clock()
        if key not in self._entries and len(self._entries) >= self.max_size:
            self._evict_oldest()
        self._entries[key] = {
            "data": data,
            "stored_at": now,
            "expires_at": now + (ttl if ttl is not None else self.default_ttl)
        }

    def delete(self, key):
        return self._entries.pop(key, None) is not None

    def clear(self):
        self._entries.clear()

    def cleanup(self):
        """Drop expired entries; returns how many were removed."""
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if now > entry["expires_at"]]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Removed {len(expired)} expired cache entries")
        return len(expired)

    def _evict_oldest(self):
        oldest = min(self._entries, key=lambda k: self._entries[k]["stored_at"])
        del self._entries[oldest]
        logger.debug(f"Evicted cache entry {oldest}")

    def get_or_set(self, key, factory, ttl=None):
        """Return the cached value for ``key`` or compute, store and return it."""
        entry = self._live_entry(key)
        if entry is not None:
            self.hits += 1
            return entry["data"]

        self.misses += 1
        data = factory()
        self.set(key, data, ttl)
        return data

    def get_stats(self):
        lookups = self.hits + self.misses
        now = self.clock()
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "hit_rate": self.hits / lookups if lookups else 0.0,
            "entries": [
                {"key": key, "age": now - entry["stored_at"], "expires_in": entry["expires_at"] - now}
                for key, entry in self._entries.items()
            ]
        }

"""
Result Cache
Content-addressed store for detection results with a size bound and TTL.

Eviction is by insertion order: reads never move an entry, so the entry
dropped when the cache is full is always the oldest one written.
"""
import hashlib
import threading
import time
from collections import OrderedDict
from typing import Callable, Dict, NamedTuple, Optional

from .config import CACHE_MAX_ENTRIES, CACHE_TTL_SECONDS
from .models import DetectionResult


class CacheEntry(NamedTuple):
    key: str
    value: DetectionResult
    inserted_at: float


def make_key(text: str) -> str:
    """Generate a hash key for caching: trimmed, lowercased, md5."""
    return hashlib.md5(text.strip().lower().encode('utf-8')).hexdigest()


class ResultCache:

    def __init__(self, max_entries: int = CACHE_MAX_ENTRIES,
                 ttl_seconds: float = CACHE_TTL_SECONDS,
                 clock: Callable[[], float] = time.time):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: 'OrderedDict[str, CacheEntry]' = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def _is_valid(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.inserted_at < self.ttl_seconds

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key``; expired entries are dropped here."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if not self._is_valid(entry, now):
                del self._entries[key]
                self._misses += 1
                return None
            self._hits += 1
            return entry

    def get(self, key: str) -> Optional[DetectionResult]:
        entry = self.get_entry(key)
        return entry.value if entry else None

    def put(self, key: str, value: DetectionResult) -> bool:
        """Store ``value`` unless a live entry already holds the key.

        Returns True if the value was written.
        """
        now = self._clock()
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                if self._is_valid(existing, now):
                    return False
                del self._entries[key]

            self._entries[key] = CacheEntry(key, value, now)

            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
            return True

    def clear(self):
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def info(self) -> Dict:
        """Get cache statistics."""
        now = self._clock()
        with self._lock:
            valid_entries = sum(1 for e in self._entries.values() if self._is_valid(e, now))
            return {
                'size': len(self._entries),
                'valid_entries': valid_entries,
                'expired_entries': len(self._entries) - valid_entries,
                'max_size': self.max_entries,
                'ttl_hours': self.ttl_seconds / 3600,
                'hits': self._hits,
                'misses': self._misses,
            }

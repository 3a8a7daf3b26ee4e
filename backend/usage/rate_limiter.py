"""
Fixed-window request limiter protecting the paid detection APIs.

Each identifier gets a counter and a window end. The first request after
the window ends starts a fresh window. State is in-process only, which is
acceptable for an anti-abuse control that is not used for billing.
"""
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, NamedTuple


@dataclass
class RateLimitEntry:
    identifier: str
    count: int
    reset_at: float


class RateLimitResult(NamedTuple):
    allowed: bool
    remaining: int
    reset_at: float
    limit: int


class RateLimiter:

    # Expired windows are swept from check() once this many identifiers are tracked
    SWEEP_THRESHOLD = 10000

    def __init__(self, clock: Callable[[], float] = time.time,
                 sweep_threshold: int = SWEEP_THRESHOLD):
        self._clock = clock
        self.sweep_threshold = sweep_threshold
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def check(self, identifier: str, window_seconds: float, max_requests: int) -> RateLimitResult:
        """Count one request for ``identifier`` and say whether it may proceed."""
        now = self._clock()
        with self._lock:
            if len(self._entries) >= self.sweep_threshold:
                self._purge(now)

            entry = self._entries.get(identifier)

            if entry is None or now > entry.reset_at:
                entry = RateLimitEntry(identifier, 1, now + window_seconds)
                self._entries[identifier] = entry
                return RateLimitResult(True, max(max_requests - 1, 0), entry.reset_at, max_requests)

            if entry.count >= max_requests:
                return RateLimitResult(False, 0, entry.reset_at, max_requests)

            entry.count += 1
            return RateLimitResult(True, max_requests - entry.count, entry.reset_at, max_requests)

    def purge_expired(self) -> int:
        """Drop entries whose window has ended. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            return self._purge(now)

    def _purge(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if now > e.reset_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def rate_limit_headers(result: RateLimitResult) -> Dict[str, str]:
    return {
        'X-RateLimit-Limit': str(result.limit),
        'X-RateLimit-Remaining': str(result.remaining),
        'X-RateLimit-Reset': str(math.ceil(result.reset_at)),
    }

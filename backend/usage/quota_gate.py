"""
Daily detection allowance for free-tier users.

The counter lives in the account store. It resets lazily: the first access on
a new calendar day zeroes it before the limit is evaluated.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time as dt_time, timedelta
from typing import Callable, Optional

from text_detector.config import FREE_DAILY_CHECKS
from text_detector.models import SubscriptionTier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotaRecord:
    user_id: str
    daily_checks: int
    last_reset_date: date


@dataclass(frozen=True)
class QuotaStatus:
    allowed: bool
    daily_checks: int
    daily_limit: Optional[int]  # None means unlimited
    remaining: Optional[int]
    reset_at: float

    def to_dict(self) -> dict:
        return {
            'daily_checks': self.daily_checks,
            'daily_limit': self.daily_limit,
            'remaining': self.remaining,
            'reset_at': self.reset_at,
        }


def _next_midnight(now: datetime) -> float:
    tomorrow = now.date() + timedelta(days=1)
    return datetime.combine(tomorrow, dt_time.min).timestamp()


class QuotaGate:
    """
    Gate detections on the per-user daily allowance.

    ``store`` must provide get_subscription, get_quota, reset_quota,
    increment_quota and a per-user ``transaction`` context manager.
    """

    def __init__(self, store, free_daily_checks: int = FREE_DAILY_CHECKS,
                 now: Callable[[], datetime] = datetime.now):
        self.store = store
        self.free_daily_checks = free_daily_checks
        self._now = now

    def _daily_limit(self, tier: SubscriptionTier) -> Optional[int]:
        return self.free_daily_checks if tier is SubscriptionTier.FREE else None

    def _current_record(self, user_id: str, now: datetime) -> QuotaRecord:
        """Read the record, resetting it first if it is from an earlier day."""
        record = self.store.get_quota(user_id)
        if record.last_reset_date != now.date():
            logger.info(f"New day for user {user_id}: resetting daily checks")
            self.store.reset_quota(user_id, now.date())
            record = self.store.get_quota(user_id)
        return record

    def _status(self, record: QuotaRecord, limit: Optional[int], now: datetime) -> QuotaStatus:
        if limit is None:
            return QuotaStatus(True, record.daily_checks, None, None, _next_midnight(now))
        remaining = max(limit - record.daily_checks, 0)
        return QuotaStatus(remaining > 0, record.daily_checks, limit, remaining, _next_midnight(now))

    def status(self, user_id: str) -> QuotaStatus:
        now = self._now()
        with self.store.transaction(user_id):
            tier = SubscriptionTier.parse(self.store.get_subscription(user_id))
            record = self._current_record(user_id, now)
            return self._status(record, self._daily_limit(tier), now)

    def can_check(self, user_id: str) -> bool:
        return self.status(user_id).allowed

    def increment(self, user_id: str):
        now = self._now()
        with self.store.transaction(user_id):
            self._current_record(user_id, now)
            self.store.increment_quota(user_id)

    def consume(self, user_id: str) -> QuotaStatus:
        """
        Check and count one detection in a single transaction.

        Returns the status after counting. If the allowance is already used up
        nothing is counted and the returned status has ``allowed=False``.
        """
        now = self._now()
        with self.store.transaction(user_id):
            tier = SubscriptionTier.parse(self.store.get_subscription(user_id))
            limit = self._daily_limit(tier)
            record = self._current_record(user_id, now)
            before = self._status(record, limit, now)
            if not before.allowed:
                return before
            checks = self.store.increment_quota(user_id)
            remaining = None if limit is None else max(limit - checks, 0)
            return QuotaStatus(True, checks, limit, remaining, before.reset_at)

"""
Account Store
User accounts, bearer-token authentication and the daily-check counters.

Stands in for the database layer: accounts are held in memory and, when an
accounts file is given, written back to JSON after every change.
"""
import json
import logging
import os
import secrets
import tempfile
import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from text_detector.errors import AuthenticationError
from text_detector.models import SubscriptionTier
from usage.quota_gate import QuotaRecord

logger = logging.getLogger(__name__)


class UnknownUserError(KeyError):
    pass


@dataclass
class UserAccount:
    user_id: str
    email: str
    api_token: str
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    daily_checks: int = 0
    last_check_reset: date = None

    def __post_init__(self):
        if self.last_check_reset is None:
            self.last_check_reset = date.today()

    def to_dict(self) -> dict:
        return {
            'user_id': self.user_id,
            'email': self.email,
            'api_token': self.api_token,
            'subscription_tier': self.subscription_tier.value,
            'daily_checks': self.daily_checks,
            'last_check_reset': self.last_check_reset.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'UserAccount':
        return cls(
            user_id=str(data['user_id']),
            email=data.get('email', ''),
            api_token=data['api_token'],
            subscription_tier=SubscriptionTier.parse(data.get('subscription_tier')),
            daily_checks=int(data.get('daily_checks', 0)),
            last_check_reset=date.fromisoformat(data['last_check_reset'])
            if data.get('last_check_reset') else None,
        )


@dataclass(frozen=True)
class AuthenticatedUser:
    user_id: str
    subscription_tier: SubscriptionTier


class AccountStore:
    """Auth and storage collaborator for the detection pipeline."""

    def __init__(self, accounts_file: Optional[str] = None):
        """
        Initialize the account store.

        Args:
            accounts_file: Path to a JSON file holding the accounts. When
                omitted, accounts live only for the life of the process.
        """
        self.accounts_file = accounts_file
        self._accounts: Dict[str, UserAccount] = {}
        self._tokens: Dict[str, str] = {}
        self._lock = threading.RLock()
        self._user_locks: Dict[str, threading.RLock] = defaultdict(threading.RLock)

        if accounts_file:
            self._load()

    # ==================== PERSISTENCE ====================

    def _load(self):
        if not os.path.exists(self.accounts_file):
            return
        try:
            with open(self.accounts_file, 'r', encoding='utf-8') as f:
                rows = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Accounts file {self.accounts_file} is not valid JSON: {e}")
            raise

        for row in rows:
            account = UserAccount.from_dict(row)
            self._accounts[account.user_id] = account
            self._tokens[account.api_token] = account.user_id
        logger.info(f"Loaded {len(self._accounts)} accounts from {self.accounts_file}")

    def _save(self):
        if not self.accounts_file:
            return
        rows = [a.to_dict() for a in self._accounts.values()]
        # Write beside the target and swap in, so a crash never leaves half a file
        directory = os.path.dirname(os.path.abspath(self.accounts_file))
        fd, tmp_path = tempfile.mkstemp(prefix='.accounts-', suffix='.json', dir=directory)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(rows, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.accounts_file)
        except Exception:
            os.unlink(tmp_path)
            raise

    # ==================== ACCOUNTS ====================

    def create_user(self, email: str,
                    subscription_tier: SubscriptionTier = SubscriptionTier.FREE,
                    user_id: Optional[str] = None,
                    api_token: Optional[str] = None) -> UserAccount:
        with self._lock:
            if user_id is None:
                user_id = str(len(self._accounts) + 1)
                while user_id in self._accounts:
                    user_id = str(int(user_id) + 1)
            if user_id in self._accounts:
                raise ValueError(f"User {user_id} already exists")

            account = UserAccount(
                user_id=user_id,
                email=email,
                api_token=api_token or secrets.token_urlsafe(24),
                subscription_tier=SubscriptionTier.parse(subscription_tier),
            )
            self._accounts[user_id] = account
            self._tokens[account.api_token] = user_id
            self._save()
            return account

    def _account(self, user_id: str) -> UserAccount:
        account = self._accounts.get(str(user_id))
        if account is None:
            raise UnknownUserError(user_id)
        return account

    def get_account(self, user_id: str) -> UserAccount:
        with self._lock:
            return self._account(user_id)

    def list_accounts(self) -> List[UserAccount]:
        with self._lock:
            return list(self._accounts.values())

    def authenticate(self, token: Optional[str]) -> AuthenticatedUser:
        if not token:
            raise AuthenticationError('No authentication token provided', code='MISSING_TOKEN')
        with self._lock:
            user_id = self._tokens.get(token)
            if user_id is None:
                raise AuthenticationError('Authentication failed', code='INVALID_TOKEN')
            account = self._accounts[user_id]
            return AuthenticatedUser(account.user_id, account.subscription_tier)

    def get_subscription(self, user_id: str) -> SubscriptionTier:
        with self._lock:
            return self._account(user_id).subscription_tier

    def update_subscription(self, user_id: str, subscription_tier) -> UserAccount:
        """Record a tier change (what the payment webhook does)."""
        tier = SubscriptionTier.parse(subscription_tier)
        with self._lock:
            account = self._account(user_id)
            account.subscription_tier = tier
            self._save()
            logger.info(f"User {user_id} subscription set to {tier.value}")
            return account

    # ==================== DAILY CHECKS ====================

    @contextmanager
    def transaction(self, user_id: str):
        """Serialize read-modify-write of one user's counters."""
        with self._lock:
            # Only existing accounts get a lock, so unknown ids cannot grow the map
            account = self._account(user_id)
            user_lock = self._user_locks[account.user_id]
        with user_lock:
            yield

    def get_quota(self, user_id: str) -> QuotaRecord:
        with self._lock:
            account = self._account(user_id)
            return QuotaRecord(account.user_id, account.daily_checks, account.last_check_reset)

    def reset_quota(self, user_id: str, today: date):
        with self._lock:
            account = self._account(user_id)
            account.daily_checks = 0
            account.last_check_reset = today
            self._save()

    def increment_quota(self, user_id: str) -> int:
        with self._lock:
            account = self._account(user_id)
            account.daily_checks += 1
            self._save()
            return account.daily_checks

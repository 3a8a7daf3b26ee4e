"""
Tests for accounts, token auth and persistence
"""
import json
import sys
from datetime import date
from pathlib import Path

import pytest

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'backend'))

from accounts import AccountStore, UnknownUserError
from accounts import account_store
from text_detector.errors import AuthenticationError
from text_detector.models import SubscriptionTier


class TestAuthentication:

    def test_token_resolves_user(self, store):
        account = store.create_user('a@example.com', SubscriptionTier.PRO)
        user = store.authenticate(account.api_token)
        assert user.user_id == account.user_id
        assert user.subscription_tier is SubscriptionTier.PRO

    def test_missing_token(self, store):
        with pytest.raises(AuthenticationError) as exc:
            store.authenticate(None)
        assert exc.value.code == 'MISSING_TOKEN'
        assert exc.value.status_code == 401

    def test_unknown_token(self, store):
        store.create_user('a@example.com')
        with pytest.raises(AuthenticationError) as exc:
            store.authenticate('not-a-token')
        assert exc.value.code == 'INVALID_TOKEN'

    def test_tier_change_visible_on_next_auth(self, store):
        account = store.create_user('a@example.com')
        store.update_subscription(account.user_id, 'yearly')
        assert store.authenticate(account.api_token).subscription_tier is SubscriptionTier.YEARLY


class TestAccounts:

    def test_sequential_ids(self, store):
        first = store.create_user('a@example.com')
        second = store.create_user('b@example.com')
        assert (first.user_id, second.user_id) == ('1', '2')
        assert first.api_token != second.api_token

    def test_duplicate_id_rejected(self, store):
        store.create_user('a@example.com', user_id='7')
        with pytest.raises(ValueError):
            store.create_user('b@example.com', user_id='7')

    def test_unknown_user(self, store):
        with pytest.raises(UnknownUserError):
            store.get_quota('404')
        with pytest.raises(KeyError):
            store.get_subscription('404')

    def test_unknown_tier_falls_back_to_free(self, store):
        account = store.create_user('a@example.com', 'platinum')
        assert account.subscription_tier is SubscriptionTier.FREE

    def test_transaction_rejects_unknown_user(self, store):
        with pytest.raises(UnknownUserError):
            with store.transaction('404'):
                pass
        assert '404' not in store._user_locks

    def test_quota_counters(self, store):
        account = store.create_user('a@example.com')
        assert store.increment_quota(account.user_id) == 1
        assert store.increment_quota(account.user_id) == 2

        store.reset_quota(account.user_id, date(2024, 1, 1))
        record = store.get_quota(account.user_id)
        assert record.daily_checks == 0
        assert record.last_reset_date == date(2024, 1, 1)


class TestPersistence:

    def test_accounts_survive_restart(self, tmp_path):
        path = str(tmp_path / 'accounts.json')
        store = AccountStore(path)
        account = store.create_user('a@example.com', SubscriptionTier.PRO)
        store.increment_quota(account.user_id)

        reloaded = AccountStore(path)
        user = reloaded.authenticate(account.api_token)
        assert user.subscription_tier is SubscriptionTier.PRO
        assert reloaded.get_quota(account.user_id).daily_checks == 1

    def test_file_format(self, tmp_path):
        path = tmp_path / 'accounts.json'
        store = AccountStore(str(path))
        store.create_user('a@example.com', SubscriptionTier.YEARLY, api_token='tok')

        rows = json.loads(path.read_text(encoding='utf-8'))
        assert rows[0]['email'] == 'a@example.com'
        assert rows[0]['api_token'] == 'tok'
        assert rows[0]['subscription_tier'] == 'yearly'

    def test_failed_write_keeps_previous_file(self, tmp_path, monkeypatch):
        path = tmp_path / 'accounts.json'
        store = AccountStore(str(path))
        account = store.create_user('a@example.com')

        def fail_midway(rows, f, **kwargs):
            f.write('[{"user_id": ')
            raise OSError('disk full')

        monkeypatch.setattr(account_store.json, 'dump', fail_midway)
        with pytest.raises(OSError):
            store.increment_quota(account.user_id)
        monkeypatch.undo()

        reloaded = AccountStore(str(path))
        assert reloaded.get_quota(account.user_id).daily_checks == 0
        assert [p.name for p in tmp_path.iterdir()] == ['accounts.json']

    def test_missing_file_starts_empty(self, tmp_path):
        store = AccountStore(str(tmp_path / 'absent.json'))
        assert store.list_accounts() == []

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / 'accounts.json'
        path.write_text('{not json', encoding='utf-8')
        with pytest.raises(json.JSONDecodeError):
            AccountStore(str(path))

"""
StopFakeAI account setup script
Creates (or re-tiers) an account in the accounts file and prints its API token.

Usage:
    python scripts/create_user.py alice@example.com --tier pro
    python scripts/create_user.py --set-tier 3 yearly
    python scripts/create_user.py --list
"""
import argparse
import os
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'backend'))

from accounts import AccountStore  # noqa: E402
from text_detector import DetectionSettings, SubscriptionTier  # noqa: E402


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Manage StopFakeAI accounts")
    parser.add_argument('email', nargs='?', help="Email of the account to create")
    parser.add_argument('--tier', default='free', choices=[t.value for t in SubscriptionTier])
    parser.add_argument('--set-tier', nargs=2, metavar=('USER_ID', 'TIER'),
                        help="Change an existing account's subscription tier")
    parser.add_argument('--list', action='store_true', help="List accounts")
    parser.add_argument('--accounts-file', default=None,
                        help="Defaults to ACCOUNTS_FILE from the environment")
    args = parser.parse_args(argv)

    accounts_file = args.accounts_file or DetectionSettings.from_env().accounts_file
    if not accounts_file:
        print("⚠ No accounts file. Set ACCOUNTS_FILE or pass --accounts-file.")
        return 1

    store = AccountStore(os.path.abspath(accounts_file))

    if args.list:
        for account in store.list_accounts():
            print(f"{account.user_id:>4}  {account.subscription_tier.value:<7} "
                  f"{account.daily_checks} checks  {account.email}")
        return 0

    if args.set_tier:
        user_id, tier = args.set_tier
        account = store.update_subscription(user_id, tier)
        print(f"✓ User {account.user_id} is now {account.subscription_tier.value}")
        return 0

    if not args.email:
        parser.error("email is required when creating an account")

    account = store.create_user(args.email, SubscriptionTier(args.tier))
    print(f"✓ Created user {account.user_id} ({account.subscription_tier.value})")
    print(f"  API token: {account.api_token}")
    return 0


if __name__ == '__main__':
    sys.exit(main())

"""
Accounts Module
User accounts, token authentication and usage counters.
"""
from .account_store import AccountStore, AuthenticatedUser, UserAccount, UnknownUserError

__all__ = ['AccountStore', 'AuthenticatedUser', 'UserAccount', 'UnknownUserError']

"""
Repositories package.

This package contains the identity store contract and its two backends:
- SqlIdentityStore: SQLAlchemy `users` table (SQLite by default)
- KeyValueIdentityStore: Redis-protocol key-value service

Usage:
    from faction_badges.repositories import IdentityStore

    # In a FastAPI route with dependency injection:
    def get_me(store: IdentityStore = Depends(get_identity_store)):
        return store.find_by_id(user_id)
"""

from faction_badges.repositories.base import IdentityStore, coerce_faction
from faction_badges.repositories.user_repository import SqlIdentityStore
from faction_badges.repositories.kv_user_repository import KeyValueIdentityStore

__all__ = [
    "IdentityStore",
    "coerce_faction",
    "SqlIdentityStore",
    "KeyValueIdentityStore",
]

"""
Key-value identity store.

Used for serverless deployments where no local disk survives between
invocations. Layout:

    seq:user:id                     atomic counter for id allocation
    user:<id>                       JSON-encoded user record
    externalIndex:<external_id>     id of the user linked to that external id

The index key is written with SET NX, so two concurrent first logins for one
external id cannot both claim it.
"""

import json
from dataclasses import replace
from typing import Any, Dict, Optional, Union
import logging

from faction_badges.core.exceptions import NotFoundException, RedisException
from faction_badges.integrations.redis_client import RedisClient
from faction_badges.models.enums import Faction
from faction_badges.models.identity import UserRecord, FactionStats, GUEST_DISPLAY_NAME
from faction_badges.repositories.base import IdentityStore, coerce_faction

logger = logging.getLogger('IDENTITY_STORE')

SEQUENCE_KEY = "seq:user:id"
USER_KEY_PATTERN = "user:*"


def user_key(user_id: int) -> str:
    return f"user:{user_id}"


def external_index_key(external_id: str) -> str:
    return f"externalIndex:{external_id}"


class KeyValueIdentityStore(IdentityStore):
    """Identity store on top of a Redis-protocol key-value service."""

    backend_name = "kv"

    def __init__(self, redis: RedisClient):
        self.redis = redis

    def _load(self, user_id: int) -> Optional[UserRecord]:
        raw = self.redis.get(user_key(user_id))
        if raw is None:
            return None
        try:
            return UserRecord.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            raise RedisException(f"Corrupt record under '{user_key(user_id)}'") from e

    def _save(self, record: UserRecord) -> None:
        self.redis.set(user_key(record.id), json.dumps(record.to_dict()))

    def _allocate_id(self) -> int:
        return self.redis.incr(SEQUENCE_KEY)

    def find_by_external_id(self, external_id: str) -> Optional[UserRecord]:
        user_id = self.redis.get(external_index_key(external_id))
        if user_id is None:
            return None
        return self._load(int(user_id))

    def find_by_id(self, user_id: int) -> Optional[UserRecord]:
        return self._load(user_id)

    def _update_profile(
        self, user_id: int, display_name: str, avatar_url: Optional[str]
    ) -> Optional[UserRecord]:
        existing = self._load(user_id)
        if existing is None:
            return None
        updated = replace(existing, display_name=display_name, avatar_url=avatar_url)
        self._save(updated)
        return updated

    def create_or_update(
        self,
        external_id: str,
        display_name: str,
        avatar_url: Optional[str] = None,
    ) -> UserRecord:
        index_key = external_index_key(external_id)
        existing_id = self.redis.get(index_key)
        if existing_id is not None:
            updated = self._update_profile(int(existing_id), display_name, avatar_url)
            if updated is not None:
                return updated
            # Index points at a vanished record; rebuild it below
            self.redis.delete(index_key)

        created = UserRecord(
            id=self._allocate_id(),
            external_id=external_id,
            display_name=display_name,
            avatar_url=avatar_url,
            faction=None,
        )
        self._save(created)

        if not self.redis.set(index_key, str(created.id), nx=True):
            # Lost the race for the index: drop the orphan and update the winner
            self.redis.delete(user_key(created.id))
            winner_id = self.redis.get(index_key)
            logger.info(f"Concurrent insert for external id {external_id}; updating user {winner_id}")
            updated = self._update_profile(int(winner_id), display_name, avatar_url) if winner_id else None
            if updated is None:
                raise RedisException(f"Index for external id '{external_id}' is inconsistent")
            return updated

        logger.info(f"Created user {created.id} for external id {external_id}")
        return created

    def create_guest(self, display_name: str = GUEST_DISPLAY_NAME) -> UserRecord:
        created = UserRecord(id=self._allocate_id(), display_name=display_name)
        self._save(created)
        logger.info(f"Created guest user {created.id}")
        return created

    def set_faction(self, user_id: int, faction: Union[Faction, str]) -> UserRecord:
        value = coerce_faction(faction)
        existing = self._load(user_id)
        if existing is None:
            raise NotFoundException("User", user_id)
        updated = replace(existing, faction=value)
        self._save(updated)
        return updated

    def get_stats(self) -> FactionStats:
        stats = FactionStats()
        for key in self.redis.scan_keys(USER_KEY_PATTERN):
            raw = self.redis.get(key)
            if raw is None:
                continue
            try:
                stats.add(UserRecord.from_dict(json.loads(raw)))
            except (ValueError, KeyError, TypeError) as e:
                raise RedisException(f"Corrupt record under '{key}'") from e
        return stats

    def get_health_status(self) -> Dict[str, Any]:
        return self.redis.get_health_status()

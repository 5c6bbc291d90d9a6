"""
User Repository

Relational identity store backed by SQLAlchemy. SQLite is the default
engine; any SQLAlchemy URL works.
"""

from typing import Any, Dict, Optional, Union
import logging

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from faction_badges.core.database import (
    create_session_factory,
    get_database_health,
    session_scope,
)
from faction_badges.core.exceptions import DatabaseException, NotFoundException
from faction_badges.models.enums import Faction
from faction_badges.models.identity import UserRecord, FactionStats, GUEST_DISPLAY_NAME
from faction_badges.models.user import User
from faction_badges.repositories.base import IdentityStore, coerce_faction

logger = logging.getLogger('IDENTITY_STORE')


def _to_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        external_id=user.external_id,
        display_name=user.display_name,
        avatar_url=user.avatar_url,
        faction=Faction.from_value(user.faction),
    )


class SqlIdentityStore(IdentityStore):
    """Identity store over the `users` table."""

    backend_name = "sqlite"

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = create_session_factory(engine)

    def find_by_external_id(self, external_id: str) -> Optional[UserRecord]:
        with session_scope(self._session_factory) as db:
            user = db.execute(
                select(User).where(User.external_id == external_id)
            ).scalar_one_or_none()
            return _to_record(user) if user else None

    def find_by_id(self, user_id: int) -> Optional[UserRecord]:
        with session_scope(self._session_factory) as db:
            user = db.get(User, user_id)
            return _to_record(user) if user else None

    def _update_profile(
        self, external_id: str, display_name: str, avatar_url: Optional[str]
    ) -> Optional[UserRecord]:
        with session_scope(self._session_factory) as db:
            user = db.execute(
                select(User).where(User.external_id == external_id)
            ).scalar_one_or_none()
            if user is None:
                return None
            user.display_name = display_name
            user.avatar_url = avatar_url
            db.flush()
            return _to_record(user)

    def create_or_update(
        self,
        external_id: str,
        display_name: str,
        avatar_url: Optional[str] = None,
    ) -> UserRecord:
        existing = self._update_profile(external_id, display_name, avatar_url)
        if existing is not None:
            return existing

        try:
            with session_scope(self._session_factory) as db:
                user = User(
                    external_id=external_id,
                    display_name=display_name,
                    avatar_url=avatar_url,
                    faction=None,
                )
                db.add(user)
                db.flush()
                record = _to_record(user)
        except DatabaseException as e:
            if not isinstance(e.__cause__, IntegrityError):
                raise
            # A concurrent login inserted the same external id first
            logger.info(f"Concurrent insert for external id {external_id}; updating existing row")
            existing = self._update_profile(external_id, display_name, avatar_url)
            if existing is None:
                raise
            return existing

        logger.info(f"Created user {record.id} for external id {external_id}")
        return record

    def create_guest(self, display_name: str = GUEST_DISPLAY_NAME) -> UserRecord:
        with session_scope(self._session_factory) as db:
            user = User(external_id=None, display_name=display_name, avatar_url=None, faction=None)
            db.add(user)
            db.flush()
            record = _to_record(user)
        logger.info(f"Created guest user {record.id}")
        return record

    def set_faction(self, user_id: int, faction: Union[Faction, str]) -> UserRecord:
        value = coerce_faction(faction)
        with session_scope(self._session_factory) as db:
            user = db.get(User, user_id)
            if user is None:
                raise NotFoundException("User", user_id)
            user.faction = value.value
            db.flush()
            return _to_record(user)

    def get_faction(self, user_id: int) -> Optional[Faction]:
        with session_scope(self._session_factory) as db:
            value = db.execute(select(User.faction).where(User.id == user_id)).scalar_one_or_none()
            return Faction.from_value(value)

    def get_stats(self) -> FactionStats:
        stats = FactionStats()
        is_guest_expr = User.external_id.is_(None)
        with session_scope(self._session_factory) as db:
            rows = db.execute(
                select(
                    is_guest_expr.label("is_guest"),
                    User.faction,
                    func.count(User.id),
                ).group_by(is_guest_expr, User.faction)
            ).all()

        for is_guest, faction, count in rows:
            stats.total_users += count
            if is_guest:
                stats.guest_users += count
            else:
                stats.authenticated_users += count
            key = faction if faction in (Faction.A.value, Faction.B.value) else "unset"
            stats.factions[key] += count
        return stats

    def get_health_status(self) -> Dict[str, Any]:
        return get_database_health(self.engine)

    def close(self) -> None:
        self.engine.dispose()

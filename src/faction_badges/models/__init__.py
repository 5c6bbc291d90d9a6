"""
Models package.

Holds the SQLAlchemy ORM model for the relational backend and the
backend-neutral records every identity store returns.

Usage:
    from faction_badges.models import User, UserRecord, Faction
    from faction_badges.models.base import Base
"""

from faction_badges.models.base import Base, TimestampMixin
from faction_badges.models.enums import Faction
from faction_badges.models.identity import UserRecord, FactionStats, GUEST_DISPLAY_NAME
from faction_badges.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "Faction",
    "UserRecord",
    "FactionStats",
    "GUEST_DISPLAY_NAME",
    "User",
]

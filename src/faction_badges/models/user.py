"""
User ORM model.

Stores persistent (GitHub) and guest identities together with the faction
each one picked.
"""

from sqlalchemy import Column, Integer, String

from faction_badges.models.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """User record; external_id is NULL for guests."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    external_id = Column(String, unique=True, nullable=True, index=True)
    display_name = Column(String, nullable=False, default="Guest")
    avatar_url = Column(String, nullable=True)
    faction = Column(String(1), nullable=True, index=True)

    # sqlite_autoincrement keeps ids from being reused after the max row goes away
    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self) -> str:
        return (
            f"<User id={self.id} external_id={self.external_id!r} "
            f"faction={self.faction!r}>"
        )

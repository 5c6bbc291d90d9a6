"""
Backend-neutral identity records.

Both identity store implementations return these plain dataclasses, so
callers never see an ORM instance or a raw key-value payload.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional

from faction_badges.models.enums import Faction

GUEST_DISPLAY_NAME = "Guest"


@dataclass(frozen=True)
class UserRecord:
    """
    A single user identity.

    Attributes:
        id: Store-assigned integer id, never reused
        external_id: GitHub user id; None for guests
        display_name: Human-readable label
        avatar_url: Avatar URL, if the provider gave one
        faction: Chosen faction, None while unset
    """

    id: int
    external_id: Optional[str] = None
    display_name: str = GUEST_DISPLAY_NAME
    avatar_url: Optional[str] = None
    faction: Optional[Faction] = None

    @property
    def is_guest(self) -> bool:
        return self.external_id is None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["faction"] = self.faction.value if self.faction else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserRecord":
        return cls(
            id=int(data["id"]),
            external_id=data.get("external_id"),
            display_name=data.get("display_name") or GUEST_DISPLAY_NAME,
            avatar_url=data.get("avatar_url"),
            faction=Faction.from_value(data.get("faction")),
        )


@dataclass
class FactionStats:
    """Aggregate counts over every stored identity."""

    total_users: int = 0
    authenticated_users: int = 0
    guest_users: int = 0
    factions: Dict[str, int] = field(default_factory=lambda: {"A": 0, "B": 0, "unset": 0})

    def add(self, record: UserRecord) -> None:
        self.total_users += 1
        if record.is_guest:
            self.guest_users += 1
        else:
            self.authenticated_users += 1
        key = record.faction.value if record.faction else "unset"
        self.factions[key] += 1

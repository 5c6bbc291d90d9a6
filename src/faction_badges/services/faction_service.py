"""
Faction assignment and faction-input normalization.

Two separate rules live here on purpose:
- assign_faction: the JSON API path. Exact, case-sensitive "A" or "B".
- normalize_badge_faction: badge/card URLs. Case-insensitive, also
  accepts "1" and "2"; anything unrecognized renders as unset.
"""

from typing import Any, Optional

from faction_badges.core.exceptions import ValidationException
from faction_badges.models.enums import Faction
from faction_badges.models.identity import UserRecord
from faction_badges.repositories.base import IdentityStore

INVALID_FACTION_MESSAGE = "Invalid faction. Use A or B."

_BADGE_ALIASES = {
    "A": Faction.A,
    "1": Faction.A,
    "B": Faction.B,
    "2": Faction.B,
}


def parse_faction(raw: Any) -> Faction:
    """
    Strictly parse a faction from API input.

    Raises:
        ValidationException: Unless raw is exactly "A" or "B"
    """
    if isinstance(raw, str) and raw in (Faction.A.value, Faction.B.value):
        return Faction(raw)
    raise ValidationException(INVALID_FACTION_MESSAGE, {"faction": raw})


def assign_faction(store: IdentityStore, user_id: int, raw: Any) -> UserRecord:
    """
    Validate raw input and record it as the user's faction.

    Validation happens before any store access, so invalid input never
    mutates state.

    Raises:
        ValidationException: Invalid faction value
        NotFoundException: Unknown user id
    """
    faction = parse_faction(raw)
    return store.set_faction(user_id, faction)


def normalize_badge_faction(raw: Any) -> Optional[Faction]:
    if raw is None or raw == "":
        return None
    return _BADGE_ALIASES.get(str(raw).strip().upper())

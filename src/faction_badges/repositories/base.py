"""
Base identity store contract.

This module defines the IdentityStore interface every persistence backend
implements. Callers (session resolution, faction assignment, the API) only
ever depend on this interface; the concrete backend is chosen once at startup.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

from faction_badges.core.exceptions import ValidationException
from faction_badges.models.enums import Faction
from faction_badges.models.identity import UserRecord, FactionStats, GUEST_DISPLAY_NAME


def coerce_faction(faction: Union[Faction, str, None]) -> Faction:
    """
    Validate a faction about to be persisted.

    Only Faction members and the exact strings "A" and "B" pass.

    Raises:
        ValidationException: For any other value
    """
    if isinstance(faction, Faction):
        return faction
    if isinstance(faction, str) and faction in (Faction.A.value, Faction.B.value):
        return Faction(faction)
    raise ValidationException("Invalid faction", {"faction": faction})


class IdentityStore(ABC):
    """
    Persistence contract for user identities and their faction.

    Implementations must keep external_id unique, allocate ids that are
    never reused, and leave faction untouched on re-authentication.

    Example:
        class InMemoryIdentityStore(IdentityStore):
            backend_name = "memory"

            def find_by_id(self, user_id: int) -> Optional[UserRecord]:
                return self._records.get(user_id)
            ...
    """

    backend_name: str = "unknown"

    @abstractmethod
    def find_by_external_id(self, external_id: str) -> Optional[UserRecord]:
        """Return the user linked to an external id, or None."""

    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[UserRecord]:
        """Return the user with this id, or None."""

    @abstractmethod
    def create_or_update(
        self,
        external_id: str,
        display_name: str,
        avatar_url: Optional[str] = None,
    ) -> UserRecord:
        """
        Upsert an externally authenticated user.

        An existing record keeps its id and faction and gets the new
        display_name and avatar_url; otherwise a new record is inserted
        with the faction unset.
        """

    @abstractmethod
    def create_guest(self, display_name: str = GUEST_DISPLAY_NAME) -> UserRecord:
        """Insert a new guest record (no external id, faction unset)."""

    @abstractmethod
    def set_faction(self, user_id: int, faction: Union[Faction, str]) -> UserRecord:
        """
        Record a faction for a user.

        Raises:
            ValidationException: If faction is not A or B
            NotFoundException: If the user does not exist
        """

    @abstractmethod
    def get_stats(self) -> FactionStats:
        """Aggregate user and faction counts."""

    @abstractmethod
    def get_health_status(self) -> Dict[str, Any]:
        """Report backend reachability."""

    def get_faction(self, user_id: int) -> Optional[Faction]:
        """Return the user's faction; None when unset or the user is missing."""
        record = self.find_by_id(user_id)
        return record.faction if record else None

    def close(self) -> None:
        """Release backend resources. No-op unless a backend holds any."""

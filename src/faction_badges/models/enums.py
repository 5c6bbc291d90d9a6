"""
Enumeration types used across the application.

This module centralizes enum definitions so the ORM model, the key-value
records and the API share the same canonical values.
"""

import enum
from typing import Optional


class Faction(str, enum.Enum):
    """
    The two selectable factions.

    An unset faction is represented by None, never by a third member.

    Attributes:
        A: Faction A
        B: Faction B
    """
    A = "A"
    B = "B"

    @classmethod
    def from_value(cls, value: Optional[str]) -> Optional["Faction"]:
        """Map a persisted value back to a Faction; None and unknown values are unset."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None

"""
User Pydantic Schemas

JSON field names are camelCase on the wire (avatarUrl, githubConfigured, ...);
Python attributes stay snake_case.
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, Optional

from faction_badges.models.identity import UserRecord, FactionStats


class UserPayload(BaseModel):
    """Public view of a user."""

    id: int
    username: str
    avatar_url: Optional[str] = Field(None, alias="avatarUrl")
    faction: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserPayload":
        return cls(
            id=record.id,
            username=record.display_name,
            avatar_url=record.avatar_url,
            faction=record.faction.value if record.faction else None,
        )


class MeResponse(BaseModel):
    """Response schema for GET /api/me."""

    authenticated: bool
    user: UserPayload


class FactionRequest(BaseModel):
    """
    Request schema for POST /api/faction.

    The value is validated by the faction service rather than by Pydantic so
    that bad values produce the API's own 400 body.
    """

    faction: Any = None


class FactionResponse(BaseModel):
    ok: bool = True
    user: UserPayload


class StatsPayload(BaseModel):
    total_users: int = Field(..., alias="totalUsers")
    authenticated_users: int = Field(..., alias="authenticatedUsers")
    guest_users: int = Field(..., alias="guestUsers")
    factions: Dict[str, int]

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_stats(cls, stats: FactionStats) -> "StatsPayload":
        return cls(
            total_users=stats.total_users,
            authenticated_users=stats.authenticated_users,
            guest_users=stats.guest_users,
            factions=dict(stats.factions),
        )


class StatsResponse(BaseModel):
    ok: bool = True
    stats: StatsPayload

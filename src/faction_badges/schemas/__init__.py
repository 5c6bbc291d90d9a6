"""
Pydantic schemas for request and response bodies.
"""

from faction_badges.schemas.common import (
    OkResponse,
    ErrorResponse,
    ConfigResponse,
    HealthCheckResponse,
)
from faction_badges.schemas.user import (
    UserPayload,
    MeResponse,
    FactionRequest,
    FactionResponse,
    StatsPayload,
    StatsResponse,
)

__all__ = [
    "OkResponse",
    "ErrorResponse",
    "ConfigResponse",
    "HealthCheckResponse",
    "UserPayload",
    "MeResponse",
    "FactionRequest",
    "FactionResponse",
    "StatsPayload",
    "StatsResponse",
]

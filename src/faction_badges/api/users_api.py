"""
User and faction API
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from faction_badges.core.dependencies import get_session_resolver
from faction_badges.core.exceptions import ValidationException
from faction_badges.schemas.common import ErrorResponse
from faction_badges.schemas.user import (
    FactionRequest,
    FactionResponse,
    MeResponse,
    UserPayload,
)
from faction_badges.services.faction_service import assign_faction, parse_faction
from faction_badges.services.session_resolver import SessionResolver

logger = logging.getLogger("USERS_API")

users_api_router = APIRouter(prefix="/api", tags=["users"])


@users_api_router.get("/me", response_model=MeResponse)
def get_me(request: Request, resolver: SessionResolver = Depends(get_session_resolver)):
    identity = resolver.resolve(request.session)
    return MeResponse(
        authenticated=identity.authenticated,
        user=UserPayload.from_record(identity.user),
    )


@users_api_router.post(
    "/faction",
    response_model=FactionResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def set_faction(
    request: Request,
    payload: Optional[FactionRequest] = None,
    resolver: SessionResolver = Depends(get_session_resolver),
):
    """
    Record the caller's faction.

    The value is checked before the session is resolved, so a rejected
    request neither creates a guest nor touches any record.
    """
    try:
        faction = parse_faction(payload.faction if payload else None)
    except ValidationException as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": e.message})

    try:
        identity = resolver.resolve(request.session)
        updated = assign_faction(resolver.store, identity.user.id, faction)
    except Exception as e:
        logger.error(f"Failed to update faction: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to update faction"},
        )

    return FactionResponse(user=UserPayload.from_record(updated))

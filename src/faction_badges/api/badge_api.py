"""
SVG badge and card endpoints.

Each image comes in three lookups:
- by user id:           /badge/{id}.svg
- by faction letter:    /badge/faction/{f}.svg  (A/B/1/2, any case)
- by query string:      /badge?faction=|f=|id=  (faction wins over id)

Anything that does not resolve to a faction renders the unset image.
"""

from typing import Optional
import re

from fastapi import APIRouter, Depends, Response

from faction_badges.core.dependencies import get_identity_store
from faction_badges.models.enums import Faction
from faction_badges.repositories import IdentityStore
from faction_badges.services.badge_renderer import SVG_MEDIA_TYPE, render_badge, render_card
from faction_badges.services.faction_service import normalize_badge_faction

badge_api_router = APIRouter(tags=["badges"])

NO_CACHE = "no-cache, no-store, must-revalidate"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# SQLite INTEGER range; no stored id lies outside it
MAX_USER_ID = 2**63 - 1
MIN_USER_ID = -(2**63)


def parse_user_id(raw: Optional[str]) -> Optional[int]:
    """
    Parse the leading integer of raw ("12", "12abc" -> 12).

    Returns None when there is no leading integer or it cannot be a stored id.
    """
    if raw is None:
        return None
    match = _LEADING_INT.match(raw)
    if not match:
        return None
    value = int(match.group(1))
    if not MIN_USER_ID <= value <= MAX_USER_ID:
        return None
    return value


def faction_for_user(store: IdentityStore, raw_id: Optional[str]) -> Optional[Faction]:
    user_id = parse_user_id(raw_id)
    if user_id is None:
        return None
    return store.get_faction(user_id)


def faction_from_query(
    store: IdentityStore,
    faction: Optional[str],
    f: Optional[str],
    user_id: Optional[str],
) -> Optional[Faction]:
    resolved = normalize_badge_faction(faction or f)
    if resolved is None:
        resolved = faction_for_user(store, user_id)
    return resolved


def svg_response(svg: str) -> Response:
    return Response(content=svg, media_type=SVG_MEDIA_TYPE, headers={"Cache-Control": NO_CACHE})


@badge_api_router.get("/badge/faction/{f}.svg")
def badge_by_faction(f: str):
    return svg_response(render_badge(normalize_badge_faction(f)))


@badge_api_router.get("/badge/{user_id}.svg")
def badge_by_user(user_id: str, store: IdentityStore = Depends(get_identity_store)):
    return svg_response(render_badge(faction_for_user(store, user_id)))


@badge_api_router.get("/badge")
def badge_by_query(
    faction: Optional[str] = None,
    f: Optional[str] = None,
    id: Optional[str] = None,
    store: IdentityStore = Depends(get_identity_store),
):
    return svg_response(render_badge(faction_from_query(store, faction, f, id)))


@badge_api_router.get("/image/faction/{f}.svg")
def card_by_faction(f: str):
    return svg_response(render_card(normalize_badge_faction(f)))


@badge_api_router.get("/image/{user_id}.svg")
def card_by_user(user_id: str, store: IdentityStore = Depends(get_identity_store)):
    return svg_response(render_card(faction_for_user(store, user_id)))


@badge_api_router.get("/image")
def card_by_query(
    faction: Optional[str] = None,
    f: Optional[str] = None,
    id: Optional[str] = None,
    store: IdentityStore = Depends(get_identity_store),
):
    return svg_response(render_card(faction_from_query(store, faction, f, id)))

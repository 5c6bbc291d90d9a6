"""
Services package.

This package contains the business logic that sits between the API routers
and the identity store:
- Session resolution (who is acting on this request)
- Faction validation and assignment
- SVG badge rendering
"""

from faction_badges.services.session_resolver import SessionResolver, ResolvedIdentity
from faction_badges.services.faction_service import (
    assign_faction,
    parse_faction,
    normalize_badge_faction,
)
from faction_badges.services.badge_renderer import render_badge, render_card

__all__ = [
    "SessionResolver",
    "ResolvedIdentity",
    "assign_faction",
    "parse_faction",
    "normalize_badge_faction",
    "render_badge",
    "render_card",
]

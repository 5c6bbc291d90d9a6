"""
SVG badge and card rendering.

Pure functions: the same faction always yields the same bytes.
"""

from typing import Optional

from faction_badges.models.enums import Faction

SVG_MEDIA_TYPE = "image/svg+xml; charset=utf-8"

_LABELS = {Faction.A: "阵营A", Faction.B: "阵营B", None: "未选择"}
_LETTERS = {Faction.A: "A", Faction.B: "B", None: "?"}

_BADGE_COLORS = {Faction.A: "#d65555", Faction.B: "#4e8dd6", None: "#9e9e9e"}
_CARD_COLORS = {Faction.A: "#ff6b6b", Faction.B: "#4dabf7", None: "#cbd5e1"}
_CARD_BACKGROUNDS = {Faction.A: "#fff5f5", Faction.B: "#e7f5ff", None: "#f8fafc"}

BADGE_WIDTH = 130
BADGE_HEIGHT = 20
BADGE_LEFT_WIDTH = 60

CARD_WIDTH = 400
CARD_HEIGHT = 160


def render_badge(faction: Optional[Faction]) -> str:
    """Render the compact 130x20 badge."""
    label = _LABELS[faction]
    color = _BADGE_COLORS[faction]
    width, height, left = BADGE_WIDTH, BADGE_HEIGHT, BADGE_LEFT_WIDTH
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" role="img" aria-label="阵营: {label}">
  <linearGradient id="smooth" x2="0" y2="100%">
    <stop offset="0" stop-color="#bbb" stop-opacity=".1"/>
    <stop offset="1" stop-opacity=".1"/>
  </linearGradient>
  <mask id="round">
    <rect width="{width}" height="{height}" rx="3" fill="#fff"/>
  </mask>
  <g mask="url(#round)">
    <rect width="{left}" height="{height}" fill="#555"/>
    <rect x="{left}" width="{width - left}" height="{height}" fill="{color}"/>
    <rect width="{width}" height="{height}" fill="url(#smooth)"/>
  </g>
  <g fill="#fff" text-anchor="middle" font-family="DejaVu Sans,Verdana,Geneva,sans-serif" font-size="11">
    <text x="{left // 2}" y="14">阵营</text>
    <text x="{left + (width - left) // 2}" y="14">{label}</text>
  </g>
</svg>"""


def render_card(faction: Optional[Faction]) -> str:
    """Render the larger 400x160 faction card."""
    label = _LABELS[faction]
    color = _CARD_COLORS[faction]
    background = _CARD_BACKGROUNDS[faction]
    width, height = CARD_WIDTH, CARD_HEIGHT
    font = "Segoe UI, Arial, sans-serif"
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" viewBox="0 0 {width} {height}">
  <defs>
    <linearGradient id="g" x1="0" x2="1" y1="0" y2="1">
      <stop offset="0%" stop-color="{background}" />
      <stop offset="100%" stop-color="#ffffff" />
    </linearGradient>
  </defs>
  <rect x="0" y="0" width="{width}" height="{height}" rx="16" fill="url(#g)" stroke="{color}" stroke-width="2" />
  <g transform="translate(24, 24)">
    <circle cx="56" cy="56" r="56" fill="{color}" opacity="0.15" />
    <circle cx="56" cy="56" r="40" fill="{color}" />
    <text x="56" y="62" text-anchor="middle" font-family="{font}" font-size="28" fill="#ffffff">{_LETTERS[faction]}</text>
  </g>
  <g transform="translate(160, 56)">
    <text x="0" y="0" font-family="{font}" font-weight="700" font-size="28" fill="#0f172a">我的阵营</text>
    <text x="0" y="40" font-family="{font}" font-weight="700" font-size="36" fill="{color}">{label}</text>
  </g>
</svg>"""

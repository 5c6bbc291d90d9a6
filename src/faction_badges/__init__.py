"""
Faction Badges: pick a faction, get an SVG badge.
"""

__version__ = "1.0.0"

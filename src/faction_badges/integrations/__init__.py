"""
External service integrations package.

This package contains client wrappers for external services:
- Redis: key-value backend of the identity store
- GitHub: OAuth authorization and profile lookup

Each integration module provides a clean interface that can be
easily replaced with a test double.
"""

from faction_badges.integrations.redis_client import RedisClient
from faction_badges.integrations.github_oauth import GitHubOAuthClient, GitHubProfile

__all__ = [
    "RedisClient",
    "GitHubOAuthClient",
    "GitHubProfile",
]

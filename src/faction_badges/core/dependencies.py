"""
Dependency providers for FastAPI routes.

Long-lived collaborators (settings, identity store, GitHub client) are built
once by the application factory and kept on `app.state`; the functions here
hand them to route handlers. Tests replace them through
`app.dependency_overrides`.
"""

from typing import Optional
from fastapi import Depends, Request
import logging

from faction_badges.core.config import Settings, KV_BACKEND
from faction_badges.core.database import create_db_engine, init_db
from faction_badges.integrations.github_oauth import GitHubOAuthClient
from faction_badges.integrations.redis_client import RedisClient
from faction_badges.repositories import IdentityStore, KeyValueIdentityStore, SqlIdentityStore
from faction_badges.services.session_resolver import SessionResolver

logger = logging.getLogger('CORE_DEPENDENCIES')


# ============================================================================
# Startup Builders
# ============================================================================

def build_identity_store(settings: Settings) -> IdentityStore:
    """
    Build the identity store selected by configuration.

    Args:
        settings: Application settings

    Returns:
        IdentityStore: Ready-to-use store (tables created for SQL backends)

    Raises:
        ValueError: If STORAGE_BACKEND is unknown
        RedisException: If the key-value backend is unreachable
    """
    backend = settings.get_storage_backend()
    if backend == KV_BACKEND:
        logger.info("Using key-value identity store")
        return KeyValueIdentityStore(RedisClient(settings.get_redis_url()))

    logger.info("Using relational identity store")
    engine = create_db_engine(settings.database_url, echo=settings.db_echo)
    init_db(engine)
    return SqlIdentityStore(engine)


def build_github_client(settings: Settings) -> Optional[GitHubOAuthClient]:
    if not settings.github_configured:
        return None
    return GitHubOAuthClient(
        client_id=settings.github_client_id,
        client_secret=settings.github_client_secret,
        callback_url=settings.get_callback_url(),
    )


# ============================================================================
# Request Dependencies
# ============================================================================

def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_identity_store(request: Request) -> IdentityStore:
    """
    Get the identity store built at startup.

    Example:
        @router.get("/badge/{user_id}.svg")
        def badge(user_id: str, store: IdentityStore = Depends(get_identity_store)):
            return store.get_faction(int(user_id))
    """
    return request.app.state.identity_store


def get_session_resolver(store: IdentityStore = Depends(get_identity_store)) -> SessionResolver:
    return SessionResolver(store)


def get_github_client(request: Request) -> Optional[GitHubOAuthClient]:
    """
    Get the GitHub OAuth client, or None when OAuth is not configured.
    """
    return request.app.state.github_client

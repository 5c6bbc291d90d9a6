"""
Application configuration management using Pydantic Settings.

This module centralizes all environment-based configuration for the application,
providing type-safe access to configuration values with validation.
"""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
import logging

logger = logging.getLogger('CORE_CONFIG')

SQLITE_BACKEND = "sqlite"
KV_BACKEND = "kv"
STORAGE_BACKENDS = (SQLITE_BACKEND, KV_BACKEND)

DEFAULT_PUBLIC_DIR = Path(__file__).resolve().parent.parent / "public"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Name of the application
        environment: Deployment environment name
        log_level: Level applied to the application loggers
        port: Port the development server binds to
        base_url: Public URL of the service (defaults to localhost:<port>)
        session_secret: Key used to sign the session cookie

        # GitHub OAuth
        github_client_id: OAuth app client id
        github_client_secret: OAuth app client secret

        # Storage
        vercel: Set by the Vercel runtime; selects the key-value backend
        storage_backend: Explicit backend override ("sqlite" or "kv")
        database_url: SQLAlchemy URL for the relational backend
        db_echo: Echo SQL statements
        redis_url: Redis connection URL for the key-value backend
        kv_url: Vercel KV connection URL (preferred over redis_url)

        public_dir: Directory holding the static front-end
    """

    # Application Settings
    app_name: str = "Faction Badges"
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 3000
    base_url: Optional[str] = None
    session_secret: str = "dev_secret_change_me"

    # GitHub OAuth
    github_client_id: str = ""
    github_client_secret: str = ""

    # Storage
    vercel: Optional[str] = None
    storage_backend: Optional[str] = None
    database_url: str = "sqlite:///data.db"
    db_echo: bool = False
    redis_url: str = "redis://localhost:6379/0"
    kv_url: Optional[str] = None

    public_dir: Path = DEFAULT_PUBLIC_DIR

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
    )

    @property
    def github_configured(self) -> bool:
        """True when both GitHub OAuth credentials are present."""
        return bool(self.github_client_id and self.github_client_secret)

    def get_base_url(self) -> str:
        return self.base_url or f"http://localhost:{self.port}"

    def get_callback_url(self) -> str:
        return f"{self.get_base_url().rstrip('/')}/auth/github/callback"

    def get_storage_backend(self) -> str:
        """
        Resolve which identity store backend to build.

        Returns:
            str: "sqlite" or "kv"

        Raises:
            ValueError: If STORAGE_BACKEND names an unknown backend
        """
        if self.storage_backend:
            backend = self.storage_backend.strip().lower()
            if backend not in STORAGE_BACKENDS:
                raise ValueError(
                    f"Unknown STORAGE_BACKEND '{self.storage_backend}'. "
                    f"Use one of: {', '.join(STORAGE_BACKENDS)}"
                )
            return backend
        return KV_BACKEND if self.vercel else SQLITE_BACKEND

    def get_redis_url(self) -> str:
        return self.kv_url or self.redis_url


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Cached settings object
    """
    return Settings()

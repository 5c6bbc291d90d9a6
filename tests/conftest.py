"""
Faction Badges: Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- Isolated settings (no .env, temporary SQLite file)
- Both identity store backends (SQLite and an in-memory Redis double)
- FastAPI TestClient wired to an injected store
- A GitHub OAuth double for the login flow
"""

from __future__ import annotations

import fnmatch
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import pytest
from fastapi.testclient import TestClient

from faction_badges.core.config import Settings
from faction_badges.core.database import create_db_engine, init_db
from faction_badges.core.dependencies import get_github_client
from faction_badges.core.exceptions import OAuthException
from faction_badges.integrations.github_oauth import GitHubProfile
from faction_badges.integrations.redis_client import RedisClient
from faction_badges.main import create_app
from faction_badges.repositories import IdentityStore, KeyValueIdentityStore, SqlIdentityStore


# ---------------------------------------------------------------------------
# Doubles
# ---------------------------------------------------------------------------


class FakeRedis:
    """In-memory stand-in for the redis.Redis calls RedisClient makes."""

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}

    def ping(self) -> bool:
        return True

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: Any, ex: Optional[int] = None, nx: bool = False) -> Optional[bool]:
        if nx and key in self.data:
            return None
        self.data[key] = str(value)
        return True

    def incr(self, key: str, amount: int = 1) -> int:
        value = int(self.data.get(key, 0)) + amount
        self.data[key] = str(value)
        return value

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def scan_iter(self, match: Optional[str] = None) -> Iterator[str]:
        for key in list(self.data):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key


class FakeGitHubClient:
    """GitHub OAuth double: records calls, returns a fixed profile or raises."""

    def __init__(self, profile: Optional[GitHubProfile] = None, error: Optional[Exception] = None) -> None:
        self.profile = profile or GitHubProfile(
            external_id="9001", username="octocat", avatar_url="https://avatars.example/octocat.png"
        )
        self.error = error
        self.exchanged_codes: list = []

    def build_authorize_url(self, state: str) -> str:
        return f"https://github.example/login/oauth/authorize?state={state}"

    def exchange_code(self, code: str) -> str:
        self.exchanged_codes.append(code)
        if self.error:
            raise self.error
        return f"token-{code}"

    def fetch_profile(self, access_token: str) -> GitHubProfile:
        return self.profile


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def make_settings(**overrides: Any) -> Settings:
    """Settings that ignore .env and any deployment variables of the host."""
    values: Dict[str, Any] = {
        "_env_file": None,
        "session_secret": "test-secret",
        "github_client_id": "",
        "github_client_secret": "",
        "vercel": None,
        "storage_backend": None,
        "kv_url": None,
        "base_url": None,
        "port": 3000,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings_factory():
    """Build isolated Settings with overrides."""
    return make_settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(database_url=f"sqlite:///{tmp_path / 'test.db'}")


@pytest.fixture
def github_settings(tmp_path: Path) -> Settings:
    return make_settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        github_client_id="client-id",
        github_client_secret="client-secret",
    )


# ---------------------------------------------------------------------------
# Identity stores
# ---------------------------------------------------------------------------


@pytest.fixture
def sql_store(settings: Settings) -> Iterator[SqlIdentityStore]:
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    store = SqlIdentityStore(engine)
    yield store
    store.close()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def kv_store(fake_redis: FakeRedis) -> KeyValueIdentityStore:
    return KeyValueIdentityStore(RedisClient(client=fake_redis))


@pytest.fixture(params=["sqlite", "kv"])
def store(request: pytest.FixtureRequest) -> IdentityStore:
    """Runs the test once per backend."""
    if request.param == "sqlite":
        return request.getfixturevalue("sql_store")
    return request.getfixturevalue("kv_store")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


@pytest.fixture
def client(settings: Settings, sql_store: SqlIdentityStore) -> Iterator[TestClient]:
    app = create_app(settings, identity_store=sql_store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_github() -> FakeGitHubClient:
    return FakeGitHubClient()


@pytest.fixture
def github_client(
    github_settings: Settings, sql_store: SqlIdentityStore, fake_github: FakeGitHubClient
) -> Iterator[TestClient]:
    """TestClient with OAuth configured and the GitHub client replaced."""
    app = create_app(github_settings, identity_store=sql_store)
    app.dependency_overrides[get_github_client] = lambda: fake_github
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def oauth_failure() -> OAuthException:
    return OAuthException("Token exchange rejected: bad_verification_code")

"""HTTP surface: identity, faction, stats, badges, static front-end and OAuth."""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from faction_badges.core.exceptions import DatabaseException, UnauthorizedException
from faction_badges.api.badge_api import parse_user_id
from faction_badges.main import create_app
from faction_badges.models.enums import Faction
from faction_badges.services.badge_renderer import render_badge, render_card


def start_login(client: TestClient) -> str:
    """Begin the OAuth flow and return the state handed to GitHub."""
    response = client.get("/auth/github", follow_redirects=False)
    assert response.status_code == 302
    return parse_qs(urlparse(response.headers["location"]).query)["state"][0]


class TestMe:
    def test_guest_is_created_and_pinned(self, client: TestClient) -> None:
        first = client.get("/api/me").json()
        second = client.get("/api/me").json()
        assert first["authenticated"] is False
        assert first["user"] == {"id": first["user"]["id"], "username": "Guest", "avatarUrl": None, "faction": None}
        assert second["user"]["id"] == first["user"]["id"]

    def test_new_browser_gets_new_guest(self, settings, sql_store) -> None:
        app = create_app(settings, identity_store=sql_store)
        with TestClient(app) as one, TestClient(app) as two:
            assert one.get("/api/me").json()["user"]["id"] != two.get("/api/me").json()["user"]["id"]


class TestFaction:
    def test_choose_faction_then_render_badge(self, client: TestClient) -> None:
        response = client.post("/api/faction", json={"faction": "A"})
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["user"]["faction"] == "A"

        user_id = body["user"]["id"]
        assert client.get("/api/me").json()["user"]["faction"] == "A"
        badge = client.get("/badge", params={"id": user_id})
        assert badge.text == render_badge(Faction.A)

    def test_lowercase_is_rejected_and_nothing_changes(self, client: TestClient) -> None:
        client.post("/api/faction", json={"faction": "B"})
        response = client.post("/api/faction", json={"faction": "a"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid faction. Use A or B."}
        assert client.get("/api/me").json()["user"]["faction"] == "B"

    @pytest.mark.parametrize("body", [{}, {"faction": None}, {"faction": 1}, {"faction": "C"}])
    def test_invalid_values(self, client: TestClient, body) -> None:
        response = client.post("/api/faction", json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid faction. Use A or B."

    def test_rejected_request_creates_no_guest(self, client: TestClient, sql_store) -> None:
        client.post("/api/faction", json={"faction": "x"})
        assert sql_store.get_stats().total_users == 0

    def test_missing_body(self, client: TestClient) -> None:
        response = client.post("/api/faction")
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid faction. Use A or B."}

    def test_malformed_body(self, client: TestClient) -> None:
        response = client.post("/api/faction", json=["A"])
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request"}

    def test_store_failure(self, client: TestClient, sql_store, monkeypatch) -> None:
        def broken(*args, **kwargs):
            raise DatabaseException("disk I/O error")

        monkeypatch.setattr(sql_store, "set_faction", broken)
        response = client.post("/api/faction", json={"faction": "A"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to update faction"}


class TestStats:
    def test_counts(self, client: TestClient, sql_store) -> None:
        client.post("/api/faction", json={"faction": "A"})
        sql_store.create_or_update("7", "octocat")

        response = client.get("/api/stats")
        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "stats": {
                "totalUsers": 2,
                "authenticatedUsers": 1,
                "guestUsers": 1,
                "factions": {"A": 1, "B": 0, "unset": 1},
            },
        }

    def test_store_failure(self, client: TestClient, sql_store, monkeypatch) -> None:
        def broken():
            raise DatabaseException("database is locked")

        monkeypatch.setattr(sql_store, "get_stats", broken)
        response = client.get("/api/stats")
        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "Failed to get stats"}


class TestConfigAndHealth:
    def test_config_without_github(self, client: TestClient) -> None:
        assert client.get("/api/config").json() == {
            "githubConfigured": False,
            "baseUrl": "http://localhost:3000",
        }

    def test_config_with_github(self, github_client: TestClient) -> None:
        assert github_client.get("/api/config").json()["githubConfigured"] is True

    def test_health(self, client: TestClient) -> None:
        body = client.get("/api/health").json()
        assert body["status"] == "healthy"
        assert body["backend"] == "sqlite"

    def test_degraded_store(self, client: TestClient, sql_store, monkeypatch) -> None:
        monkeypatch.setattr(sql_store, "get_health_status", lambda: {"status": "unhealthy", "error": "down"})
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "degraded"


class TestBadges:
    def test_svg_headers(self, client: TestClient) -> None:
        response = client.get("/badge/faction/A.svg")
        assert response.headers["content-type"] == "image/svg+xml; charset=utf-8"
        assert response.headers["cache-control"] == "no-cache, no-store, must-revalidate"

    @pytest.mark.parametrize(
        "path, faction",
        [
            ("/badge/faction/a.svg", Faction.A),
            ("/badge/faction/1.svg", Faction.A),
            ("/badge/faction/B.svg", Faction.B),
            ("/badge/faction/2.svg", Faction.B),
            ("/badge/faction/zzz.svg", None),
            ("/badge?faction=b", Faction.B),
            ("/badge?f=1", Faction.A),
            ("/badge", None),
        ],
    )
    def test_badge_by_letter(self, client: TestClient, path, faction) -> None:
        assert client.get(path).text == render_badge(faction)

    def test_badge_by_user_id(self, client: TestClient, sql_store) -> None:
        user = sql_store.create_guest()
        sql_store.set_faction(user.id, "B")
        assert client.get(f"/badge/{user.id}.svg").text == render_badge(Faction.B)
        assert client.get(f"/badge/{user.id}abc.svg").text == render_badge(Faction.B)

    def test_unknown_user_renders_unset(self, client: TestClient) -> None:
        response = client.get("/badge/999.svg")
        assert response.status_code == 200
        assert response.text == render_badge(None)
        assert client.get("/badge/nope.svg").text == render_badge(None)

    @pytest.mark.parametrize(
        "path, render",
        [
            ("/badge/99999999999999999999.svg", render_badge),
            ("/badge?id=99999999999999999999", render_badge),
            ("/badge/-99999999999999999999.svg", render_badge),
            ("/image/99999999999999999999.svg", render_card),
            ("/image?id=99999999999999999999", render_card),
        ],
    )
    def test_out_of_range_id_renders_unset(self, client: TestClient, path, render) -> None:
        """Ids too large for an INTEGER column cannot exist and render unset."""
        response = client.get(path)
        assert response.status_code == 200
        assert response.text == render(None)

    def test_query_faction_beats_id(self, client: TestClient, sql_store) -> None:
        user = sql_store.create_guest()
        sql_store.set_faction(user.id, "B")
        assert client.get("/badge", params={"faction": "A", "id": user.id}).text == render_badge(Faction.A)
        assert client.get("/badge", params={"faction": "x", "id": user.id}).text == render_badge(Faction.B)

    def test_cards(self, client: TestClient, sql_store) -> None:
        user = sql_store.create_guest()
        sql_store.set_faction(user.id, "A")
        assert client.get(f"/image/{user.id}.svg").text == render_card(Faction.A)
        assert client.get("/image/faction/2.svg").text == render_card(Faction.B)
        assert client.get("/image", params={"id": user.id}).text == render_card(Faction.A)
        assert client.get("/image").text == render_card(None)


class TestFrontEnd:
    def test_index_is_not_cached(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "no-store" in response.headers["cache-control"]

    def test_static_assets(self, client: TestClient) -> None:
        assert client.get("/app.js").status_code == 200
        assert client.get("/app.css").status_code == 200
        assert client.get("/missing.txt").status_code == 404

    def test_session_cookie_lasts_for_browser_session(self, client: TestClient) -> None:
        response = client.get("/api/me")
        cookie = response.headers["set-cookie"].lower()
        assert cookie.startswith("session=")
        assert "max-age" not in cookie
        assert "expires" not in cookie
        assert "samesite=lax" in cookie

    def test_security_headers(self, client: TestClient) -> None:
        headers = client.get("/api/me").headers
        assert headers["x-content-type-options"] == "nosniff"
        assert headers["x-frame-options"] == "SAMEORIGIN"
        assert headers["referrer-policy"] == "no-referrer"


class TestGitHubLogin:
    def test_unconfigured_login(self, client: TestClient) -> None:
        response = client.get("/auth/github", follow_redirects=False)
        assert response.status_code == 501
        assert "GITHUB_CLIENT_ID" in response.json()["error"]

    def test_unconfigured_callback(self, client: TestClient) -> None:
        response = client.get("/auth/github/callback", params={"code": "abc"}, follow_redirects=False)
        assert response.status_code == 501

    def test_full_flow(self, github_client: TestClient, fake_github) -> None:
        state = start_login(github_client)
        response = github_client.get(
            "/auth/github/callback", params={"code": "abc", "state": state}, follow_redirects=False
        )
        assert response.status_code == 302
        assert response.headers["location"] == "/"
        assert fake_github.exchanged_codes == ["abc"]

        me = github_client.get("/api/me").json()
        assert me["authenticated"] is True
        assert me["user"]["username"] == "octocat"
        assert me["user"]["avatarUrl"] == "https://avatars.example/octocat.png"

    def test_relogin_reuses_record(self, github_client: TestClient, sql_store) -> None:
        for _ in range(2):
            state = start_login(github_client)
            github_client.get("/auth/github/callback", params={"code": "abc", "state": state}, follow_redirects=False)
        assert sql_store.get_stats().authenticated_users == 1

    def test_state_mismatch(self, github_client: TestClient, fake_github) -> None:
        start_login(github_client)
        response = github_client.get(
            "/auth/github/callback", params={"code": "abc", "state": "forged"}, follow_redirects=False
        )
        assert response.headers["location"] == "/?auth=failed"
        assert fake_github.exchanged_codes == []

    def test_state_is_single_use(self, github_client: TestClient) -> None:
        state = start_login(github_client)
        github_client.get("/auth/github/callback", params={"code": "abc", "state": state}, follow_redirects=False)
        replay = github_client.get(
            "/auth/github/callback", params={"code": "abc", "state": state}, follow_redirects=False
        )
        assert replay.headers["location"] == "/?auth=failed"

    def test_denied_by_user(self, github_client: TestClient) -> None:
        start_login(github_client)
        response = github_client.get(
            "/auth/github/callback", params={"error": "access_denied"}, follow_redirects=False
        )
        assert response.headers["location"] == "/?auth=failed"

    def test_exchange_failure(self, github_client: TestClient, fake_github, oauth_failure) -> None:
        fake_github.error = oauth_failure
        state = start_login(github_client)
        response = github_client.get(
            "/auth/github/callback", params={"code": "abc", "state": state}, follow_redirects=False
        )
        assert response.headers["location"] == "/?auth=failed"
        assert github_client.get("/api/me").json()["authenticated"] is False

    def test_logout(self, github_client: TestClient) -> None:
        state = start_login(github_client)
        github_client.get("/auth/github/callback", params={"code": "abc", "state": state}, follow_redirects=False)

        assert github_client.post("/logout").json() == {"ok": True}
        me = github_client.get("/api/me").json()
        assert me["authenticated"] is False
        assert me["user"]["username"] == "Guest"


class TestErrorHandlers:
    def test_unauthorized(self, settings, sql_store) -> None:
        app = create_app(settings, identity_store=sql_store)

        def members_only():
            raise UnauthorizedException()

        app.add_api_route("/api/members-only", members_only)
        # routes added after the static mount would be shadowed by it
        app.router.routes.insert(0, app.router.routes.pop())

        with TestClient(app) as client:
            response = client.get("/api/members-only")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_unexpected_error(self, settings, sql_store, monkeypatch) -> None:
        def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(sql_store, "create_guest", broken)
        app = create_app(settings, identity_store=sql_store)
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/api/me")
        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}


class TestParseUserId:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("12", 12),
            ("12abc", 12),
            (" 7", 7),
            ("-3", -3),
            ("9223372036854775807", 2**63 - 1),
            ("9223372036854775808", None),
            ("-9223372036854775809", None),
            ("abc", None),
            ("", None),
            (None, None),
        ],
    )
    def test_leading_integer_within_range(self, raw, expected) -> None:
        assert parse_user_id(raw) == expected

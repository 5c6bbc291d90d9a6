"""
GitHub OAuth login and logout.

The browser is sent to GitHub with a random `state` kept in the session.
On callback the state is checked, the code exchanged, and the profile upserted
into the identity store before the user id is bound as the session principal.
"""

from typing import Optional
import logging
import secrets

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from faction_badges.core.dependencies import get_github_client, get_identity_store
from faction_badges.core.exceptions import ConfigurationException, OAuthException
from faction_badges.integrations.github_oauth import GitHubOAuthClient
from faction_badges.repositories import IdentityStore
from faction_badges.schemas.common import OkResponse
from faction_badges.services.session_resolver import SessionResolver

logger = logging.getLogger("AUTH_API")

auth_api_router = APIRouter(tags=["auth"])

OAUTH_STATE_KEY = "oauth_state"
NOT_CONFIGURED_MESSAGE = (
    "GitHub OAuth not configured. Please set GITHUB_CLIENT_ID and GITHUB_CLIENT_SECRET in .env"
)


def require_github_client(
    client: Optional[GitHubOAuthClient] = Depends(get_github_client),
) -> GitHubOAuthClient:
    if client is None:
        raise ConfigurationException(NOT_CONFIGURED_MESSAGE)
    return client


def _failed_login() -> RedirectResponse:
    return RedirectResponse("/?auth=failed", status_code=status.HTTP_302_FOUND)


@auth_api_router.get("/auth/github")
def github_login(request: Request, client: GitHubOAuthClient = Depends(require_github_client)):
    state = secrets.token_urlsafe(24)
    request.session[OAUTH_STATE_KEY] = state
    return RedirectResponse(client.build_authorize_url(state), status_code=status.HTTP_302_FOUND)


@auth_api_router.get("/auth/github/callback")
def github_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    client: GitHubOAuthClient = Depends(require_github_client),
    store: IdentityStore = Depends(get_identity_store),
):
    """
    Finish the OAuth flow.

    Any OAuth-level failure (user denied access, state mismatch, code
    exchange or profile errors) redirects to /?auth=failed. Store failures
    are not OAuth failures and surface as 500.
    """
    expected_state = request.session.pop(OAUTH_STATE_KEY, None)

    if error or not code:
        logger.info(f"GitHub login aborted: {error or 'missing code'}")
        return _failed_login()
    if not expected_state or not state or not secrets.compare_digest(expected_state, state):
        logger.warning("GitHub login rejected: state mismatch")
        return _failed_login()

    try:
        token = client.exchange_code(code)
        profile = client.fetch_profile(token)
    except OAuthException as e:
        logger.warning(f"GitHub login failed: {e.message}")
        return _failed_login()

    user = store.create_or_update(profile.external_id, profile.username, profile.avatar_url)
    SessionResolver.login(request.session, user)
    logger.info(f"User {user.id} signed in via GitHub")
    return RedirectResponse("/", status_code=status.HTTP_302_FOUND)


@auth_api_router.post("/logout", response_model=OkResponse)
def logout(request: Request):
    SessionResolver.logout(request.session)
    return OkResponse()


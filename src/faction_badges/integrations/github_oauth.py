"""
GitHub OAuth web-flow client.

Handles the three calls of the authorization-code flow:
- build the authorize URL the browser is redirected to
- exchange the returned code for an access token
- fetch the authenticated user's profile

HTTP goes through a requests.Session; every failure surfaces as OAuthException.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any
from urllib.parse import urlencode
import logging

import requests

from faction_badges.core.exceptions import OAuthException

logger = logging.getLogger('GITHUB_OAUTH')

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"
USER_API_URL = "https://api.github.com/user"
DEFAULT_SCOPE = "read:user"
FALLBACK_USERNAME = "GitHubUser"


@dataclass(frozen=True)
class GitHubProfile:
    """The subset of a GitHub user profile the application stores."""

    external_id: str
    username: str
    avatar_url: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "GitHubProfile":
        """
        Normalize a GET /user payload.

        The username falls back from login to the display name to a fixed
        placeholder.

        Raises:
            OAuthException: If the payload carries no user id
        """
        user_id = payload.get("id")
        if user_id is None:
            raise OAuthException("Profile response is missing the user id")
        username = payload.get("login") or payload.get("name") or FALLBACK_USERNAME
        return cls(
            external_id=str(user_id),
            username=username,
            avatar_url=payload.get("avatar_url") or None,
        )


class GitHubOAuthClient:
    """
    Client for GitHub's OAuth web application flow.

    Example:
        client = GitHubOAuthClient(client_id, client_secret, callback_url)
        redirect_to = client.build_authorize_url(state)
        ...
        token = client.exchange_code(code)
        profile = client.fetch_profile(token)
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        callback_url: str,
        scope: str = DEFAULT_SCOPE,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url
        self.scope = scope
        self.timeout = timeout
        self._http = session or requests.Session()

    def build_authorize_url(self, state: str) -> str:
        query = urlencode({
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "scope": self.scope,
            "state": state,
        })
        return f"{AUTHORIZE_URL}?{query}"

    def exchange_code(self, code: str) -> str:
        """
        Exchange an authorization code for an access token.

        Args:
            code: The code GitHub appended to the callback URL

        Returns:
            str: Access token

        Raises:
            OAuthException: On transport errors or when GitHub rejects the code
        """
        try:
            response = self._http.post(
                ACCESS_TOKEN_URL,
                headers={"Accept": "application/json"},
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "code": code,
                    "redirect_uri": self.callback_url,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"GitHub token exchange failed: {e}")
            raise OAuthException("Token exchange failed") from e

        token = data.get("access_token")
        if not token:
            # GitHub answers 200 with an error body for bad or expired codes
            error = data.get("error", "unknown_error")
            logger.warning(f"GitHub rejected authorization code: {error}")
            raise OAuthException(f"Token exchange rejected: {error}", {"error": error})
        return token

    def fetch_profile(self, access_token: str) -> GitHubProfile:
        """
        Fetch the profile of the user the token belongs to.

        Raises:
            OAuthException: On transport errors or malformed responses
        """
        try:
            response = self._http.get(
                USER_API_URL,
                headers={
                    "Accept": "application/vnd.github+json",
                    "Authorization": f"Bearer {access_token}",
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"GitHub profile fetch failed: {e}")
            raise OAuthException("Profile fetch failed") from e

        return GitHubProfile.from_api(payload)

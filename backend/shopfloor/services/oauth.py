"""
Google OAuth 2.0 client.

Implements the authorization-code flow: build the consent URL, exchange the
returned code for tokens, then read the user's profile from the userinfo
endpoint.
"""

from urllib.parse import urlencode

import httpx

from shopfloor.core.config import Settings, settings
from shopfloor.core.exceptions import ShopfloorError
from shopfloor.core.observability import get_logger

logger = get_logger(__name__)

SCOPES = "openid email profile"


class OAuthError(ShopfloorError):
    """Raised when the provider rejects a request or returns unusable data."""


class GoogleOAuthClient:
    def __init__(self, config: Settings | None = None, timeout: float = 10.0) -> None:
        self.config = config or settings
        self.timeout = timeout

    def authorization_url(self, redirect_uri: str, state: str) -> str:
        params = {
            "client_id": self.config.GOOGLE_CLIENT_ID,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": SCOPES,
            "state": state,
            "access_type": "online",
            "prompt": "select_account",
        }
        return f"{self.config.GOOGLE_AUTHORIZATION_URL}?{urlencode(params)}"

    def exchange_code(self, code: str, redirect_uri: str) -> str:
        """Exchange an authorization code for an access token."""
        data = {
            "code": code,
            "client_id": self.config.GOOGLE_CLIENT_ID,
            "client_secret": self.config.GOOGLE_CLIENT_SECRET,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            response = httpx.post(
                self.config.GOOGLE_TOKEN_URL, data=data, timeout=self.timeout
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("OAuth code exchange failed", error=str(e))
            raise OAuthError("OAuth authentication failed") from e

        access_token = response.json().get("access_token")
        if not access_token:
            raise OAuthError("OAuth authentication failed")
        return access_token

    def fetch_userinfo(self, access_token: str) -> dict:
        try:
            response = httpx.get(
                self.config.GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("OAuth userinfo request failed", error=str(e))
            raise OAuthError("OAuth authentication failed") from e
        return response.json()

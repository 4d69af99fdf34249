"""Google OAuth 2.0 authorization-code flow"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urlencode

import aiohttp

from healthmoney.integrations.google_calendar.exceptions import OAuthError

logger = logging.getLogger(__name__)

AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

DEFAULT_SCOPES = [
    "openid",
    "email",
    "profile",
    "https://www.googleapis.com/auth/calendar",
]


@dataclass
class TokenResponse:
    access_token: str
    refresh_token: Optional[str]
    expires_in: int
    scopes: tuple[str, ...]


@dataclass
class UserInfo:
    sub: str
    email: Optional[str] = None
    name: Optional[str] = None


class GoogleOAuth:
    """Handle the Google OAuth 2.0 login flow"""

    registration_id = "google"

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        redirect_uri: str,
        scopes: Optional[list[str]] = None,
        session_factory: Callable[[], aiohttp.ClientSession] = aiohttp.ClientSession,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = scopes or list(DEFAULT_SCOPES)
        self._session_factory = session_factory

        if not all([self.client_id, self.client_secret, self.redirect_uri]):
            logger.warning("Google OAuth credentials not configured")

    def get_authorization_url(self, state: str) -> str:
        """
        Generate the Google OAuth authorization URL

        Args:
            state: Opaque value echoed back on the callback

        Returns:
            Authorization URL for user to visit
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "access_type": "offline",
            "state": state,
        }

        return f"{AUTHORIZATION_URL}?{urlencode(params)}"

    async def exchange_code_for_tokens(self, code: str) -> TokenResponse:
        """
        Exchange authorization code for access and refresh tokens

        Args:
            code: Authorization code from OAuth callback

        Returns:
            TokenResponse with the issued tokens
        """
        try:
            async with self._session_factory() as session:
                async with session.post(
                    TOKEN_URL,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "redirect_uri": self.redirect_uri,
                        "grant_type": "authorization_code",
                    },
                ) as resp:
                    if resp.status != 200:
                        error_text = await resp.text()
                        logger.error(f"Token exchange failed: {error_text}")
                        raise OAuthError(f"Failed to exchange code: {resp.status}", status_code=resp.status)

                    data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"OAuth token exchange error: {e!r}")
            raise OAuthError(f"Token exchange request failed: {e!r}") from e

        access_token = data.get("access_token")
        if not access_token:
            raise OAuthError("No access token in response")

        logger.info("Successfully exchanged code for tokens")
        scope = data.get("scope")
        return TokenResponse(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            expires_in=data.get("expires_in", 3600),
            scopes=tuple(scope.split()) if scope else tuple(self.scopes),
        )

    async def fetch_userinfo(self, access_token: str) -> UserInfo:
        """Look up the signed-in user's identity"""
        try:
            async with self._session_factory() as session:
                async with session.get(
                    USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                ) as resp:
                    if resp.status != 200:
                        error_text = await resp.text()
                        logger.error(f"Userinfo lookup failed: {error_text}")
                        raise OAuthError(f"Failed to fetch user info: {resp.status}", status_code=resp.status)

                    data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Userinfo lookup error: {e!r}")
            raise OAuthError(f"Userinfo request failed: {e!r}") from e

        if not data.get("sub"):
            raise OAuthError("No subject in user info response")

        return UserInfo(sub=data["sub"], email=data.get("email"), name=data.get("name"))

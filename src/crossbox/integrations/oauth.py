# OAuth Manager — Google OAuth 2.0 auth code flow + token refresh for Drive.
# Created: 2026-10-06

from __future__ import annotations

import logging
import time
import urllib.parse

import httpx

from crossbox.errors import AuthenticationError
from crossbox.integrations.token_store import OAuthTokens, TokenStore

logger = logging.getLogger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]

# Desktop "out of band" style redirect; the user pastes the code back
DEFAULT_REDIRECT_URI = "http://localhost:8765/oauth/callback"


class OAuthManager:
    """Google OAuth 2.0 authorization code flow + token refresh.

    Supports:
    - Authorization URL generation
    - Code exchange for tokens
    - Token refresh
    - Handing out a valid access token
    """

    def __init__(
        self,
        token_store: TokenStore | None = None,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.store = token_store or TokenStore()
        self._timeout = timeout
        self._transport = transport

    def get_auth_url(
        self,
        client_id: str,
        redirect_uri: str = DEFAULT_REDIRECT_URI,
        scopes: list[str] | None = None,
        state: str = "",
    ) -> str:
        """Generate the URL the user opens to grant Drive access."""
        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes or DRIVE_SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state

        return f"{AUTH_URL}?{urllib.parse.urlencode(params)}"

    async def exchange_code(
        self,
        service: str,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str = DEFAULT_REDIRECT_URI,
        scopes: list[str] | None = None,
    ) -> OAuthTokens:
        """Exchange an authorization code for access + refresh tokens.

        Raises:
            httpx.HTTPError: the token endpoint rejected the code or was
                unreachable.
            AuthenticationError: the response carried no usable token.
        """
        async with self._client() as client:
            resp = await client.post(
                TOKEN_URL,
                data={
                    "code": code,
                    "client_id": client_id,
                    "client_secret": client_secret,
                    "redirect_uri": redirect_uri,
                    "grant_type": "authorization_code",
                },
            )
            resp.raise_for_status()
            data = resp.json()

        try:
            tokens = OAuthTokens(
                service=service,
                access_token=data["access_token"],
                refresh_token=data.get("refresh_token"),
                token_type=data.get("token_type", "Bearer"),
                expires_at=time.time() + float(data.get("expires_in", 3600)),
                scopes=scopes or list(DRIVE_SCOPES),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise AuthenticationError(f"Malformed token response: {e!r}") from e

        self.store.save(tokens)
        logger.info("OAuth tokens obtained for %s", service)
        return tokens

    async def refresh_token(
        self, service: str, client_id: str, client_secret: str
    ) -> OAuthTokens | None:
        """Refresh an expired access token. Returns None if refresh fails."""
        tokens = self.store.load(service)
        if not tokens or not tokens.refresh_token:
            return None

        try:
            async with self._client() as client:
                resp = await client.post(
                    TOKEN_URL,
                    data={
                        "refresh_token": tokens.refresh_token,
                        "client_id": client_id,
                        "client_secret": client_secret,
                        "grant_type": "refresh_token",
                    },
                )
                resp.raise_for_status()
                data = resp.json()

            access_token = data["access_token"]
            expires_at = time.time() + float(data.get("expires_in", 3600))
            refresh_token = data.get("refresh_token", tokens.refresh_token)
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Token refresh failed for %s: %r", service, e)
            return None

        tokens.access_token = access_token
        tokens.expires_at = expires_at
        tokens.refresh_token = refresh_token

        self.store.save(tokens)
        logger.info("Refreshed OAuth token for %s", service)
        return tokens

    async def get_valid_token(
        self, service: str, client_id: str, client_secret: str
    ) -> str | None:
        """Get a valid access token, refreshing if expired.

        Returns the access token string, or None if unavailable.
        """
        tokens = self.store.load(service)
        if not tokens:
            return None

        if not tokens.is_expired():
            return tokens.access_token

        refreshed = await self.refresh_token(service, client_id, client_secret)
        if refreshed:
            return refreshed.access_token

        return None

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

"""Google OAuth 2.0 authorization-code flow: build the consent URL, exchange the code, read the profile."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

import httpx

from notekeeper.services.identity import FederatedProfile

if TYPE_CHECKING:
    from notekeeper.core.config import Settings

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

GOOGLE_SCOPES = ("openid", "profile", "email")


class GoogleOAuthError(Exception):
    """Raised when Google rejects the exchange or returns an unusable profile."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class GoogleOAuthClient:
    """Thin httpx client for Google's OAuth 2.0 endpoints."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> GoogleOAuthClient:
        secret = settings.GOOGLE_CLIENT_SECRET.get_secret_value() if settings.GOOGLE_CLIENT_SECRET else ""
        return cls(
            client_id=(settings.GOOGLE_CLIENT_ID or "").strip(),
            client_secret=secret,
            redirect_uri=settings.google_callback_url,
            timeout=settings.OAUTH_REQUEST_TIMEOUT_SEC,
        )

    def authorization_url(self, state: str) -> str:
        """Consent URL requesting profile and email, always showing the account chooser."""
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(GOOGLE_SCOPES),
            "state": state,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> FederatedProfile:
        """Exchange the authorization code and return the resolved profile."""
        async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout)) as client:
            access_token = await self._exchange_code(client, code)
            userinfo = await self._get_userinfo(client, access_token)
        return profile_from_userinfo(userinfo)

    async def _exchange_code(self, client: httpx.AsyncClient, code: str) -> str:
        data = {
            "code": code,
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
        }
        try:
            resp = await client.post(GOOGLE_TOKEN_URL, data=data)
        except httpx.HTTPError as e:
            raise GoogleOAuthError(f"HTTP error during token exchange: {type(e).__name__}") from e
        if resp.status_code != 200:
            raise GoogleOAuthError(f"Token exchange failed: {resp.status_code}", resp.status_code)
        access_token = resp.json().get("access_token")
        if not access_token:
            raise GoogleOAuthError("Token response missing access_token.")
        return access_token

    async def _get_userinfo(self, client: httpx.AsyncClient, access_token: str) -> dict[str, Any]:
        try:
            resp = await client.get(
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as e:
            raise GoogleOAuthError(f"HTTP error fetching user info: {type(e).__name__}") from e
        if resp.status_code != 200:
            raise GoogleOAuthError(f"User info request failed: {resp.status_code}", resp.status_code)
        return resp.json()


def profile_from_userinfo(userinfo: dict[str, Any]) -> FederatedProfile:
    """Map an OpenID Connect userinfo document to a FederatedProfile (verified emails only)."""
    provider_id = str(userinfo.get("sub") or "")
    if not provider_id:
        raise GoogleOAuthError("User info missing subject.")
    email = (userinfo.get("email") or "").strip()
    verified = userinfo.get("email_verified") in (True, "true")
    return FederatedProfile(
        provider_id=provider_id,
        display_name=userinfo.get("name") or "",
        emails=[email] if email and verified else [],
    )

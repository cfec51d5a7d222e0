"""
services/google_oauth.py

Google sign-in (authorization-code flow) over plain httpx.

- authorization_url: consent screen redirect
- fetch_profile: code -> token -> userinfo, mapped to GoogleProfile
- get_google_client is a FastAPI dependency so tests can swap in a fake

Unconfigured GOOGLE_* settings raise ConfigurationError (503).

"""

from dataclasses import dataclass
from typing import Any, Dict
from urllib.parse import urlencode

import httpx

from app.core.config import settings
from app.core.exceptions import AuthenticationFailed, ConfigurationError


AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


@dataclass
class GoogleProfile:
    google_id: str
    email: str
    name: str
    avatar: str | None = None


class GoogleOAuthClient:
    """
    Authorization-code flow against Google's OAuth2 endpoints.
    - authorization_url() : where to send the browser
    - fetch_profile(code) : exchange the code, then read the userinfo endpoint
    """

    def __init__(
        self,
        *,
        client_id: str | None,
        client_secret: str | None,
        redirect_uri: str | None,
        timeout: float = 10.0,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._timeout = timeout

    def _require_config(self) -> None:
        if not (self._client_id and self._client_secret and self._redirect_uri):
            raise ConfigurationError("Google OAuth is not configured")

    def authorization_url(self, state: str | None = None) -> str:
        self._require_config()
        params = {
            "client_id": self._client_id,
            "redirect_uri": self._redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "access_type": "online",
            "prompt": "select_account",
        }
        if state:
            params["state"] = state
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    def fetch_profile(self, code: str) -> GoogleProfile:
        self._require_config()
        try:
            with httpx.Client(timeout=self._timeout) as client:
                r = client.post(
                    TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                        "redirect_uri": self._redirect_uri,
                        "grant_type": "authorization_code",
                    },
                )
                r.raise_for_status()
                access_token = r.json().get("access_token")
                if not access_token:
                    raise AuthenticationFailed("Google did not return an access token")

                r = client.get(USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
                r.raise_for_status()
                info: Dict[str, Any] = r.json()
        except httpx.HTTPError as e:
            raise AuthenticationFailed("Google authentication failed") from e

        if not info.get("sub") or not info.get("email"):
            raise AuthenticationFailed("Google profile is missing an email address")

        return GoogleProfile(
            google_id=info["sub"],
            email=info["email"],
            name=info.get("name") or info["email"].split("@")[0],
            avatar=info.get("picture"),
        )


def get_google_client() -> GoogleOAuthClient:
    # FastAPI dependency; tests override it with a fake client
    return GoogleOAuthClient(
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        redirect_uri=settings.GOOGLE_REDIRECT_URI,
    )

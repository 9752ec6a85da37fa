"""Google OAuth 2.0 client (authorization-code flow).

Google is the identity provider for OAuth sign-ins: it vouches for the
email address, display name and avatar. Passwords are never involved.
"""

import logging
from dataclasses import dataclass
from typing import Any, Self
from urllib.parse import urlencode

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fazlaka.config import settings

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleOAuthError(Exception):
    """Identity provider rejected the request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class GoogleProfile:
    """Identity asserted by Google."""

    subject: str
    email: str
    name: str | None
    picture: str | None
    email_verified: bool


class GoogleOAuthClient:
    """Talks to Google's OAuth endpoints with retries on transient failures.

    Example usage:
        with GoogleOAuthClient() as google:
            profile = google.fetch_profile(code)
    """

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        redirect_uri: str | None = None,
        timeout: float = 10.0,
    ):
        self.client_id = client_id or settings.google_client_id
        self.client_secret = client_secret or settings.google_client_secret
        self.redirect_uri = redirect_uri or settings.google_redirect_uri
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @property
    def client(self) -> httpx.Client:
        """Lazy initialization of HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def authorization_url(self, state: str) -> str:
        """URL the browser is sent to for consent."""
        query = urlencode(
            {
                "client_id": self.client_id,
                "redirect_uri": self.redirect_uri,
                "response_type": "code",
                "scope": "openid email profile",
                "state": state,
                "prompt": "select_account",
            }
        )
        return f"{AUTHORIZE_URL}?{query}"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        reraise=True,
    )
    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        return self.client.request(method, url, **kwargs)

    def _request_json(self, method: str, url: str, **kwargs: Any) -> dict:
        try:
            response = self._send(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Google OAuth HTTP {e.response.status_code} for {method} {url}: {e.response.text[:200]}"
            )
            raise GoogleOAuthError(
                f"Google responded {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"Google OAuth request failed for {method} {url}: {e}")
            raise GoogleOAuthError(f"Could not reach Google: {e}") from e
        except ValueError as e:
            logger.warning(f"Google OAuth returned a non-JSON body for {method} {url}")
            raise GoogleOAuthError("Google returned an unreadable response") from e

    def exchange_code(self, code: str) -> str:
        """Trade an authorization code for an access token."""
        payload = self._request_json(
            "POST",
            TOKEN_URL,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        access_token = payload.get("access_token")
        if not access_token:
            raise GoogleOAuthError("Token response did not include an access token")
        return access_token

    def fetch_userinfo(self, access_token: str) -> GoogleProfile:
        payload = self._request_json(
            "GET", USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
        )
        email = payload.get("email")
        if not email:
            raise GoogleOAuthError("Google profile has no email address")
        return GoogleProfile(
            subject=str(payload.get("sub", "")),
            email=email,
            name=payload.get("name"),
            picture=payload.get("picture"),
            email_verified=bool(payload.get("email_verified", False)),
        )

    def fetch_profile(self, code: str) -> GoogleProfile:
        """Full callback leg: code -> access token -> verified profile."""
        return self.fetch_userinfo(self.exchange_code(code))

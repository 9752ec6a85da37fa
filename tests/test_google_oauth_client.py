"""Tests for the Google OAuth client."""

from unittest.mock import patch
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from fazlaka.services.google_oauth_client import (
    AUTHORIZE_URL,
    TOKEN_URL,
    USERINFO_URL,
    GoogleOAuthClient,
    GoogleOAuthError,
)


@pytest.fixture
def client():
    """Create Google OAuth client for testing."""
    return GoogleOAuthClient(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://localhost/callback",
    )


def _mock_transport(routes: dict):
    def handler(request: httpx.Request) -> httpx.Response:
        status, body = routes[str(request.url).split("?")[0]]
        return httpx.Response(status, json=body)

    return httpx.Client(transport=httpx.MockTransport(handler))


class TestAuthorizationUrl:
    def test_contains_client_and_state(self, client):
        url = client.authorization_url("state-123")

        assert url.startswith(AUTHORIZE_URL)
        query = parse_qs(urlparse(url).query)
        assert query["client_id"] == ["client-id"]
        assert query["state"] == ["state-123"]
        assert query["redirect_uri"] == ["http://localhost/callback"]
        assert query["response_type"] == ["code"]

    def test_configured(self, client):
        assert client.configured is True
        assert GoogleOAuthClient(client_id="", client_secret="").configured is False


class TestFetchProfile:
    def test_success(self, client):
        client._client = _mock_transport(
            {
                TOKEN_URL: (200, {"access_token": "at-1"}),
                USERINFO_URL: (
                    200,
                    {
                        "sub": "123",
                        "email": "g@x.com",
                        "name": "Gina",
                        "picture": "https://img/g.png",
                        "email_verified": True,
                    },
                ),
            }
        )

        profile = client.fetch_profile("code-1")

        assert profile.subject == "123"
        assert profile.email == "g@x.com"
        assert profile.name == "Gina"
        assert profile.email_verified is True

    def test_rejected_code_raises(self, client):
        client._client = _mock_transport({TOKEN_URL: (400, {"error": "invalid_grant"})})

        with pytest.raises(GoogleOAuthError) as exc:
            client.fetch_profile("bad-code")
        assert exc.value.status_code == 400

    def test_missing_access_token_raises(self, client):
        client._client = _mock_transport({TOKEN_URL: (200, {})})

        with pytest.raises(GoogleOAuthError):
            client.exchange_code("code-1")

    def test_profile_without_email_raises(self, client):
        client._client = _mock_transport({USERINFO_URL: (200, {"sub": "123"})})

        with pytest.raises(GoogleOAuthError):
            client.fetch_userinfo("at-1")

    def test_non_json_body_raises(self, client):
        client._client = httpx.Client(
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, text="<html>maintenance</html>")
            )
        )

        with pytest.raises(GoogleOAuthError):
            client.exchange_code("code-1")

    def test_network_error_raises_after_retries(self, client):
        with patch.object(
            GoogleOAuthClient, "_send", side_effect=httpx.ConnectError("down")
        ):
            with pytest.raises(GoogleOAuthError):
                client.exchange_code("code-1")


def test_close_releases_http_client(client):
    _ = client.client
    client.close()

    assert client._client is None

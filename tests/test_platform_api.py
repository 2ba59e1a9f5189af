"""Unit tests for the platform auth client."""

import json

import httpx
import pytest

from app.models import Identity
from app.services.exceptions import AuthenticationError, TransportError
from app.services.platform_api import PlatformClient, code_challenge, new_code_verifier


def client_with(handler) -> PlatformClient:
    return PlatformClient(transport=httpx.MockTransport(handler))


class TestPkce:
    """Tests for the PKCE verifier and challenge helpers."""

    def test_verifier_length_and_alphabet(self):
        verifier = new_code_verifier()

        assert 43 <= len(verifier) <= 128
        assert set(verifier) <= set(
            "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"
        )

    def test_verifiers_are_unique(self):
        assert new_code_verifier() != new_code_verifier()

    def test_challenge_matches_rfc7636_example(self):
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"

        assert code_challenge(verifier) == "E9-cQ24ZtC2zgXbHtF7Q5cVd9FwxF5vyj8xyA9CSbr8"


class TestAuthorizeUrl:
    """Tests for building the OAuth redirect."""

    def test_includes_provider_redirect_and_challenge(self):
        client = PlatformClient()
        url = httpx.URL(
            client.authorize_url("google", "http://localhost:8000/auth/callback", "chal")
        )

        assert url.path.endswith("/auth/v1/authorize")
        assert url.params["provider"] == "google"
        assert url.params["redirect_to"] == "http://localhost:8000/auth/callback"
        assert url.params["code_challenge"] == "chal"
        assert url.params["code_challenge_method"] == "s256"


class TestExchangeCode:
    """Tests for exchange_code_for_session."""

    @pytest.mark.asyncio
    async def test_returns_session(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["grant_type"] = request.url.params["grant_type"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200, json={"access_token": "tok", "expires_in": 3600, "user": {"id": "u1"}}
            )

        session = await client_with(handler).exchange_code_for_session("abc", code_verifier="ver")

        assert session["access_token"] == "tok"
        assert seen["path"].endswith("/token")
        assert seen["grant_type"] == "pkce"
        assert seen["body"] == {"auth_code": "abc", "code_verifier": "ver"}

    @pytest.mark.asyncio
    async def test_rejected_code(self):
        client = client_with(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))

        with pytest.raises(AuthenticationError):
            await client.exchange_code_for_session("bad")

    @pytest.mark.asyncio
    async def test_missing_token_in_response(self):
        client = client_with(lambda request: httpx.Response(200, json={"user": {"id": "u1"}}))

        with pytest.raises(AuthenticationError):
            await client.exchange_code_for_session("abc")

    @pytest.mark.asyncio
    async def test_server_error(self):
        client = client_with(lambda request: httpx.Response(502))

        with pytest.raises(TransportError) as exc_info:
            await client.exchange_code_for_session("abc")
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TransportError):
            await client_with(handler).exchange_code_for_session("abc")


class TestGetIdentity:
    """Tests for get_identity."""

    @pytest.mark.asyncio
    async def test_sends_bearer_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json={"id": "u1", "email": "a@example.com"})

        identity = await client_with(handler).get_identity("tok")

        assert identity == Identity(id="u1", email="a@example.com")
        assert seen["auth"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_invalid_token_is_none(self):
        client = client_with(lambda request: httpx.Response(401))

        assert await client.get_identity("expired") is None


class TestSignOut:
    """Tests for sign_out."""

    @pytest.mark.asyncio
    async def test_posts_logout(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            return httpx.Response(204)

        await client_with(handler).sign_out("tok")

        assert seen["method"] == "POST"
        assert seen["path"].endswith("/logout")

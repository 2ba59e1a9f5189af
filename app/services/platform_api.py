"""HTTP client for the hosted platform's auth endpoints.

Only the pieces the server-side routes need: building the OAuth authorize
URL, exchanging an authorization code for a session, looking up the user
behind an access token, and invalidating a session on sign-out.
"""

import base64
import hashlib
import logging
import secrets
from typing import Optional

import httpx

from app.config import get_settings
from app.models import Identity
from app.services.exceptions import AuthenticationError, TransportError

logger = logging.getLogger(__name__)

settings = get_settings()


def new_code_verifier() -> str:
    """Random PKCE verifier (43-128 URL-safe characters)."""
    return secrets.token_urlsafe(64)


def code_challenge(verifier: str) -> str:
    """S256 challenge for a PKCE verifier."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class PlatformClient:
    """Client for the platform's auth REST API."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.auth_base_url
        self.api_key = settings.platform_anon_key
        self._transport = transport

    def _get_headers(self, access_token: Optional[str] = None) -> dict:
        headers = {"apikey": self.api_key}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=30.0)

    def authorize_url(self, provider: str, redirect_to: str, challenge: str) -> str:
        """URL that starts the provider's OAuth flow with a PKCE challenge."""
        url = httpx.URL(
            f"{self.base_url}/authorize",
            params={
                "provider": provider,
                "redirect_to": redirect_to,
                "code_challenge": challenge,
                "code_challenge_method": "s256",
            },
        )
        return str(url)

    async def exchange_code_for_session(
        self, code: str, code_verifier: Optional[str] = None
    ) -> dict:
        """Trade an authorization code for a session.

        Returns:
            Session payload with at least ``access_token`` and ``user``.
        """
        payload = {"auth_code": code}
        if code_verifier:
            payload["code_verifier"] = code_verifier
        data = await self._request(
            "POST", "/token", params={"grant_type": "pkce"}, json=payload
        )
        if not data or "access_token" not in data:
            raise AuthenticationError("Code exchange returned no session")
        return data

    async def get_identity(self, access_token: str) -> Optional[Identity]:
        """Look up the user behind an access token, or None if it is invalid."""
        try:
            user = await self._request("GET", "/user", access_token=access_token)
        except AuthenticationError:
            return None
        return Identity.from_user(user) if user else None

    async def sign_out(self, access_token: str) -> None:
        """Invalidate the session server-side."""
        await self._request("POST", "/logout", access_token=access_token)

    async def _request(
        self,
        method: str,
        path: str,
        access_token: Optional[str] = None,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Optional[dict]:
        try:
            async with self._client() as client:
                response = await client.request(
                    method,
                    f"{self.base_url}{path}",
                    headers=self._get_headers(access_token),
                    params=params,
                    json=json,
                )
        except httpx.HTTPError as e:
            logger.warning("Platform request %s %s failed: %s", method, path, e)
            raise TransportError(f"Platform unreachable: {e}") from e

        if response.status_code in (400, 401, 403):
            raise AuthenticationError(
                f"Platform rejected {method} {path} ({response.status_code})"
            )
        if response.is_error:
            raise TransportError(
                f"Platform error on {method} {path}", status_code=response.status_code
            )
        if response.status_code == 204 or not response.content:
            return None
        return response.json()


platform_client = PlatformClient()

"""Routes for the OAuth round trip and sign-out."""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse

from app.config import get_settings
from app.services import platform_client
from app.services.exceptions import BookmarkError
from app.services.platform_api import code_challenge, new_code_verifier

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/auth", tags=["auth"])

# Short-lived cookie carrying the PKCE verifier between signin and callback
VERIFIER_MAX_AGE = 600


def _home() -> str:
    """Where to send the browser afterwards."""
    return f"{settings.site_url.rstrip('/')}/"


def _verifier_cookie() -> str:
    return f"{settings.session_cookie_name}-code-verifier"


@router.get("/signin")
async def sign_in(provider: Optional[str] = Query(default=None, description="OAuth provider")):
    """Redirect to the provider's consent screen."""
    verifier = new_code_verifier()
    url = platform_client.authorize_url(
        provider or settings.oauth_provider, settings.callback_url, code_challenge(verifier)
    )
    response = RedirectResponse(url)
    response.set_cookie(
        _verifier_cookie(),
        verifier,
        max_age=VERIFIER_MAX_AGE,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/callback")
async def oauth_callback(
    request: Request,
    code: Optional[str] = Query(default=None, description="Authorization code"),
):
    """Exchange the authorization code for a session and go home.

    Without a code, or when the exchange fails, the browser is sent home
    unauthenticated.
    """
    response = RedirectResponse(_home(), status_code=303)
    response.delete_cookie(_verifier_cookie())
    if not code:
        return response

    verifier = request.cookies.get(_verifier_cookie())
    try:
        session = await platform_client.exchange_code_for_session(code, code_verifier=verifier)
    except BookmarkError as e:
        logger.warning("OAuth code exchange failed: %s", e)
        return response

    response.set_cookie(
        settings.session_cookie_name,
        session["access_token"],
        max_age=session.get("expires_in"),
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/session")
async def current_session(request: Request) -> JSONResponse:
    """Report the user behind the session cookie, if any."""
    token = request.cookies.get(settings.session_cookie_name)
    identity = None
    if token:
        try:
            identity = await platform_client.get_identity(token)
        except BookmarkError as e:
            logger.warning("Session lookup failed: %s", e)

    if identity is None:
        return JSONResponse(content={"user": None})
    return JSONResponse(content={"user": {"id": identity.id, "email": identity.email}})


@router.post("/signout")
async def sign_out(request: Request):
    """Invalidate the session server-side, drop the cookie and go home."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        try:
            await platform_client.sign_out(token)
        except BookmarkError as e:
            logger.warning("Server-side sign-out failed: %s", e)

    response = RedirectResponse(_home(), status_code=303)
    response.delete_cookie(settings.session_cookie_name)
    return response

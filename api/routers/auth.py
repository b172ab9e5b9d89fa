"""
Login/logout via IBM Cloud App ID and the current-user endpoint.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from api.auth import SESSION_USER_KEY, OptionalUser
from api.deps import AppIdSettings
from watchlist_backend.integrations.appid import AppIdError, build_authorization_url, complete_login

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

SESSION_STATE_KEY = "oauth_state"
LOGIN_PATH = "/auth/login"
CALLBACK_PATH = "/ibm/cloud/appid/callback"


@router.get(LOGIN_PATH)
def login(request: Request, appid: AppIdSettings) -> RedirectResponse:
    """Start the App ID authorization-code flow."""
    state = secrets.token_urlsafe(24)
    request.session[SESSION_STATE_KEY] = state
    return RedirectResponse(build_authorization_url(appid, state=state), status_code=302)


@router.get(CALLBACK_PATH)
def login_callback(
    request: Request,
    appid: AppIdSettings,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    """
    Finish the App ID flow and store the identity in the session.

    Any failure sends the user back through the login redirect.
    """
    expected_state = request.session.pop(SESSION_STATE_KEY, None)
    if error or not code:
        logger.warning(f"App ID callback without code (error={error!r})")
        return RedirectResponse(LOGIN_PATH, status_code=302)
    if not expected_state or not secrets.compare_digest(str(state or ""), expected_state):
        logger.warning("App ID callback state mismatch")
        return RedirectResponse(LOGIN_PATH, status_code=302)

    try:
        identity = complete_login(appid, code)
    except AppIdError as exc:
        logger.error(f"App ID login failed: {exc}")
        return RedirectResponse(LOGIN_PATH, status_code=302)

    request.session[SESSION_USER_KEY] = identity.to_session()
    logger.info(f"User {identity.sub} logged in")
    return RedirectResponse("/", status_code=302)


@router.get("/auth/logout")
def logout(request: Request) -> RedirectResponse:
    request.session.clear()
    return RedirectResponse("/", status_code=302)


@router.get("/api/user")
def get_user(user: OptionalUser) -> dict:
    """Report whether the caller is logged in, and who they are."""
    return {"isAuthenticated": user is not None, "user": user.to_public() if user else None}

"""
IBM Cloud App ID (OpenID Connect) web-app flow.

Only the authorization-code flow is implemented: build the authorization URL,
exchange the callback code for tokens, then read the user's profile from
`/userinfo`. The API keeps the resulting identity in its session.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import requests

DEFAULT_TIMEOUT_SECONDS = 10.0


class AppIdError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class AppIdConfig:
    client_id: str
    secret: str
    oauth_server_url: str
    redirect_uri: str
    tenant_id: str | None = None

    @classmethod
    def from_env(cls) -> "AppIdConfig":
        values = {
            "APPID_CLIENT_ID": (os.getenv("APPID_CLIENT_ID") or "").strip(),
            "APPID_SECRET": (os.getenv("APPID_SECRET") or "").strip(),
            "APPID_OAUTH_SERVER_URL": (os.getenv("APPID_OAUTH_SERVER_URL") or "").strip(),
            "REDIRECT_URI": (os.getenv("REDIRECT_URI") or "").strip(),
        }
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise RuntimeError(f"App ID is not configured; missing: {', '.join(missing)}")
        return cls(
            client_id=values["APPID_CLIENT_ID"],
            secret=values["APPID_SECRET"],
            oauth_server_url=values["APPID_OAUTH_SERVER_URL"].rstrip("/"),
            redirect_uri=values["REDIRECT_URI"],
            tenant_id=(os.getenv("APPID_TENANT_ID") or "").strip() or None,
        )


@dataclass(frozen=True)
class AppIdIdentity:
    sub: str
    name: str | None = None
    email: str | None = None

    def to_session(self) -> dict[str, Any]:
        return {"sub": self.sub, "name": self.name, "email": self.email}


def build_authorization_url(config: AppIdConfig, *, state: str, force_login: bool = True) -> str:
    params = {
        "response_type": "code",
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "scope": "openid",
        "state": state,
    }
    if force_login:
        # Always show the login page, even when App ID still has a session.
        params["prompt"] = "login"
    query = urlencode(params)
    return f"{config.oauth_server_url}/authorization?{query}"


def _json_object(resp: requests.Response, context: str) -> dict[str, Any]:
    if resp.status_code != 200:
        raise AppIdError(f"App ID {context} failed with HTTP {resp.status_code}.", status_code=resp.status_code)
    try:
        payload = resp.json()
    except ValueError as exc:
        raise AppIdError(f"App ID {context} returned non-JSON response.") from exc
    if not isinstance(payload, dict):
        raise AppIdError(f"App ID {context} returned unexpected JSON shape.")
    return payload


def exchange_code(
    config: AppIdConfig,
    code: str,
    *,
    session: requests.Session | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> dict[str, Any]:
    """Exchange an authorization code for App ID tokens."""
    session = session or requests.Session()
    try:
        resp = session.post(
            f"{config.oauth_server_url}/token",
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": config.redirect_uri,
            },
            auth=(config.client_id, config.secret),
            headers={"accept": "application/json"},
            timeout=timeout_seconds,
        )
    except requests.RequestException as exc:
        raise AppIdError(f"App ID token request failed: {exc}") from exc

    tokens = _json_object(resp, "token exchange")
    if not tokens.get("access_token"):
        raise AppIdError("App ID token response missing access_token.")
    return tokens


def fetch_identity(
    config: AppIdConfig,
    access_token: str,
    *,
    session: requests.Session | None = None,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> AppIdIdentity:
    session = session or requests.Session()
    try:
        resp = session.get(
            f"{config.oauth_server_url}/userinfo",
            headers={"authorization": f"Bearer {access_token}", "accept": "application/json"},
            timeout=timeout_seconds,
        )
    except requests.RequestException as exc:
        raise AppIdError(f"App ID userinfo request failed: {exc}") from exc

    profile = _json_object(resp, "userinfo")
    sub = profile.get("sub")
    if not isinstance(sub, str) or not sub:
        raise AppIdError("App ID userinfo response missing sub.")
    return AppIdIdentity(sub=sub, name=profile.get("name"), email=profile.get("email"))


def complete_login(
    config: AppIdConfig,
    code: str,
    *,
    session: requests.Session | None = None,
) -> AppIdIdentity:
    """Run the callback half of the flow: code -> tokens -> identity."""
    tokens = exchange_code(config, code, session=session)
    return fetch_identity(config, tokens["access_token"], session=session)

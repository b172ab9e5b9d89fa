"""
Authentication utilities for FastAPI.

The App ID login flow stores the user's identity in the signed session cookie
(see `api/routers/auth.py`). Handlers never read the session directly: they
receive an explicit `AuthContext` through these dependencies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, Request

from api.deps import ApiError

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user"


@dataclass(frozen=True)
class AuthContext:
    """Authenticated caller for one request."""

    subject_id: str
    name: str | None = None
    email: str | None = None

    def to_public(self) -> dict[str, Any]:
        return {"sub": self.subject_id, "name": self.name, "email": self.email}


def get_current_user(request: Request) -> AuthContext | None:
    """
    Get the current user from the session.

    Returns None if nobody is logged in or the stored identity is unusable.
    """
    stored = request.session.get(SESSION_USER_KEY)
    if not isinstance(stored, dict):
        return None

    sub = stored.get("sub")
    if not isinstance(sub, str) or not sub:
        logger.warning("Session user has no subject id; treating request as anonymous")
        return None
    return AuthContext(subject_id=sub, name=stored.get("name"), email=stored.get("email"))


OptionalUser = Annotated[AuthContext | None, Depends(get_current_user)]


def require_user(user: OptionalUser) -> AuthContext:
    """
    Dependency that requires a logged-in user.

    Raises 401 if no session identity is present.
    """
    if user is None:
        raise ApiError("Unauthorized", status_code=401)
    return user


def require_user_for_save(user: OptionalUser) -> AuthContext:
    """Same as `require_user`, with the message the add-to-watchlist route reports."""
    if user is None:
        raise ApiError("User not logged in", status_code=401)
    return user


# Type aliases for dependency injection
CurrentUser = Annotated[AuthContext, Depends(require_user)]
SavingUser = Annotated[AuthContext, Depends(require_user_for_save)]

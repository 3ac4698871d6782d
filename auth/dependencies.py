"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Every protected request carries "Authorization: Bearer <jwt>". The token is
verified (signature + expiry) and its subject is resolved against the user
store on every request -- nothing is cached between requests.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.

Attach get_current_user at router level (APIRouter(dependencies=[...])) so the
check runs before any handler on that router. Routers without it are the
public allowlist.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.tokens import decode_access_token
from core.config import get_settings
from users.models import User


def _bearer_token(request: Request) -> str | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def try_get_current_user(request: Request) -> User | None:
    """Authenticate the request from its bearer token.

    Returns the stored User on success, None on any failure: missing header,
    bad signature, expired token, subject no longer registered, an email that
    now belongs to a different user id, or (with REQUIRE_ENABLED_ACCOUNTS) a
    disabled account.
    """
    token = _bearer_token(request)
    if token is None:
        return None
    payload = decode_access_token(token)
    if payload is None:
        return None
    user = request.app.state.user_store.get_by_email(payload["sub"])
    # The email may have been deleted and registered again since issue.
    if user is None or user.id != payload["user_id"]:
        return None
    if get_settings().require_enabled_accounts and not user.enabled:
        return None
    return user


def get_current_user(request: Request) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    The resolved principal is also left on request.state.user for handlers
    that only need it occasionally.
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail="Full authentication is required to access this resource.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    request.state.user = user
    return user

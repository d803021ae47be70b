# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
FastAPI dependency guards – the session layer in front of protected routes.

Per request:

    no bearer token          → 401 "Access denied. No token provided."
    token fails verification → 401 "Invalid token"
    token verifies           → identity + user attached to request.state

A rejection is final: the route handler never runs.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.providers import IdentityProvider
from core.errors import AuthError, ForbiddenError
from models.user import User
from users.store import IdentityStore, get_store

# auto_error=False so that a missing header is reported with our own message
bearer_scheme = HTTPBearer(auto_error=False)


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity_provider


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    provider: IdentityProvider = Depends(get_identity_provider),
    store: IdentityStore = Depends(get_store),
) -> User:
    """
    Dependency: verify the bearer token with the configured provider, load
    the matching User row and check the account is active.

    Raises 401 if the token is missing or invalid, or the user is gone/disabled.
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("Access denied. No token provided.")

    identity = provider.verify_token(credentials.credentials)
    user = provider.resolve_user(store, identity)
    if not user or not user.is_active:
        raise AuthError("User not found or inactive")

    request.state.token = credentials.credentials
    request.state.identity = identity
    request.state.user = user
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """
    Dependency: wraps :func:`get_current_user` and additionally asserts
    ``role == 'admin'``.  Raises 403 otherwise.
    """
    if current_user.role != "admin":
        raise ForbiddenError("Admin access required")
    return current_user

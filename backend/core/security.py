# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Central security module.  All cryptographic primitives live here.  No other
module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. JWT creation / decoding                  (PyJWT / HS256)
3. Client IP extraction for the audit trail

The FastAPI guards that sit on top of these primitives live in
``auth.dependencies``.
"""

import secrets
from datetime import datetime, timedelta, timezone

import jwt as _jwt        # PyJWT
from fastapi import Request
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps

from core.errors import AuthError

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing  (pure Python, no glibc constraint)
# ---------------------------------------------------------------------------
# passlib's pbkdf2_sha256 is an adaptive, salted hash: the salt and the round
# count are embedded in the hash string, so the work factor can be raised
# later without invalidating existing digests.
# ---------------------------------------------------------------------------


def hash_password(plain: str, rounds: int) -> str:
    """
    Hash a plaintext password with PBKDF2-SHA256.

    Returns the full passlib hash string  e.g. "$pbkdf2-sha256$600000$...".
    """
    return _pbkdf2.using(rounds=rounds).hash(plain)


def verify_password(plain: str, stored_hash: str | None) -> bool:
    """
    Constant-time verification of a plaintext password against a
    pbkdf2_sha256 hash produced by :func:`hash_password`.

    A missing or malformed stored hash never verifies.
    """
    if not stored_hash:
        return False
    try:
        return _pbkdf2.verify(plain, stored_hash)
    except ValueError:
        return False


# ---------------------------------------------------------------------------
# 2.  JWT – access / refresh tokens
# ---------------------------------------------------------------------------

ACCESS = "access"
REFRESH = "refresh"


def create_token(
    data: dict,
    secret_key: str,
    expires_delta: timedelta,
    token_type: str = ACCESS,
) -> str:
    """
    Sign a JWT with HS256.

    *data* should contain at minimum: sub (email), user_id, role.
    ``exp``, ``iat``, ``jti`` and ``type`` claims are added automatically.
    """
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update(
        {
            "exp": now + expires_delta,
            "iat": now,
            "jti": secrets.token_hex(16),
            "type": token_type,
        }
    )
    return _jwt.encode(to_encode, secret_key, algorithm="HS256")


def decode_token(token: str, secret_key: str, token_type: str = ACCESS) -> dict:
    """
    Decode and verify a JWT.  Raises :class:`AuthError` (401) on any failure
    (expired, bad signature, malformed, wrong token type).
    """
    try:
        payload = _jwt.decode(
            token,
            secret_key,
            algorithms=["HS256"],
            options={"require": ["exp", "sub"]},
        )
    except _jwt.PyJWTError:
        raise AuthError("Invalid token")

    if payload.get("type") != token_type:
        raise AuthError("Invalid token")
    return payload


# -- IP Address extraction ----------------------------------------------------


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address from the request.
    Checks X-Forwarded-For header first (for proxies), then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first (original client)
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"

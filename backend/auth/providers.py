# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Identity providers – who issues and verifies session tokens.

Two implementations share one interface:

* :class:`LocalIdentityProvider`   passwords are checked against our own
  ``users`` table and tokens are HS256 JWTs signed with ``SECRET_KEY``.
* :class:`SupabaseIdentityProvider` credentials and tokens belong to
  Supabase Auth (GoTrue REST API).  Our ``users`` table only holds the
  profile, linked through ``supabase_id``.

Pick one with ``AUTH_PROVIDER=local|supabase``.

Security notes
--------------
* Tokens are never persisted server-side.  With the local provider a token
  stays valid until it expires; logout only discards it client-side.
* Transport failures are logged and reported as a generic 500; only the
  provider's own user-facing rejection messages (e.g. weak password) are
  passed through.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from urllib.parse import urlencode

import httpx

from core.config import Settings
from core.errors import AuthError, ConflictError, UpstreamError, ValidationError
from core.logger import logger
from core.security import ACCESS, REFRESH, create_token, decode_token
from models.user import SIGNUP_ROLES, User
from users.store import IdentityStore, normalize_email, raise_for_errors, validate_user_fields

OAUTH_PROVIDERS = {"google": "google", "linkedin": "linkedin_oidc"}

# Generic message used for both "no such email" and "wrong password"
_LOGIN_FAIL = "Invalid credentials"


@dataclass
class Identity:
    """The verified subject of a bearer token."""

    subject: str
    email: str
    provider: str
    email_verified: bool = False
    metadata: dict = field(default_factory=dict)


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int  # seconds


class IdentityProvider:
    """Interface shared by the local and Supabase providers."""

    name = "abstract"

    def register(self, store: IdentityStore, name: str, email: str, password: str, role: str) -> User:
        raise NotImplementedError

    def authenticate(self, store: IdentityStore, email: str, password: str) -> tuple[User, TokenPair]:
        raise NotImplementedError

    def verify_token(self, token: str) -> Identity:
        raise NotImplementedError

    def resolve_user(self, store: IdentityStore, identity: Identity) -> User | None:
        raise NotImplementedError

    def refresh(self, store: IdentityStore, refresh_token: str) -> TokenPair:
        raise NotImplementedError

    def revoke(self, token: str) -> None:
        raise NotImplementedError

    def oauth_url(self, provider: str) -> str:
        raise ValidationError("OAuth sign-in is not available with this auth provider")


# ---------------------------------------------------------------------------
# Local – our own table, our own JWTs
# ---------------------------------------------------------------------------


class LocalIdentityProvider(IdentityProvider):
    name = "local"

    def __init__(self, settings: Settings):
        if not settings.secret_key:
            raise RuntimeError("SECRET_KEY must be set when AUTH_PROVIDER=local")
        self._secret = settings.secret_key
        self._access_ttl = timedelta(minutes=settings.access_token_expire_minutes)
        self._refresh_ttl = timedelta(minutes=settings.refresh_token_expire_minutes)

    def _issue(self, user: User) -> TokenPair:
        claims = {"sub": user.email, "user_id": user.id, "role": user.role}
        return TokenPair(
            access_token=create_token(claims, self._secret, self._access_ttl, ACCESS),
            refresh_token=create_token(claims, self._secret, self._refresh_ttl, REFRESH),
            expires_in=int(self._access_ttl.total_seconds()),
        )

    def register(self, store, name, email, password, role):
        return store.create_user(name=name, email=email, password=password, role=role)

    def authenticate(self, store, email, password):
        user = store.find_by_email(email)

        # Unified failure path – no information leaks about whether the email exists
        if not user or not user.match_password(password):
            raise AuthError(_LOGIN_FAIL)
        if not user.is_active:
            raise AuthError("Account disabled")

        return user, self._issue(user)

    def verify_token(self, token):
        payload = decode_token(token, self._secret, ACCESS)
        return Identity(subject=str(payload.get("user_id")), email=payload["sub"], provider=self.name)

    def resolve_user(self, store, identity):
        try:
            user_id = int(identity.subject)
        except ValueError:
            return None
        return store.find_by_id(user_id)

    def refresh(self, store, refresh_token):
        payload = decode_token(refresh_token, self._secret, REFRESH)
        user = store.find_by_id(payload.get("user_id"))
        if not user or not user.is_active:
            raise AuthError("Invalid token")
        return self._issue(user)

    def revoke(self, token):
        # Stateless tokens: nothing to revoke server-side
        logger.debug("local logout – token discarded client-side")


# ---------------------------------------------------------------------------
# Supabase – GoTrue REST API
# ---------------------------------------------------------------------------


class SupabaseIdentityProvider(IdentityProvider):
    name = "supabase"

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None):
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY must be set when AUTH_PROVIDER=supabase")
        self._base_url = settings.supabase_url.rstrip("/") + "/auth/v1"
        self._anon_key = settings.supabase_anon_key
        self._timeout = settings.auth_timeout_seconds
        self._frontend_url = settings.frontend_url.rstrip("/")
        self._transport = transport

    def _request(self, method: str, path: str, token: str | None = None, **kwargs) -> httpx.Response:
        headers = {"apikey": self._anon_key}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            with httpx.Client(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
                headers=headers,
            ) as client:
                return client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise UpstreamError("Authentication service unavailable", raw=f"{type(exc).__name__}: {exc}")

    @staticmethod
    def _error_text(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        return body.get("msg") or body.get("error_description") or body.get("message") or str(body)

    @staticmethod
    def _identity(user: dict) -> Identity:
        return Identity(
            subject=user["id"],
            email=normalize_email(user.get("email")),
            provider="supabase",
            email_verified=user.get("email_confirmed_at") is not None,
            metadata=user.get("user_metadata") or {},
        )

    @staticmethod
    def _tokens(body: dict) -> TokenPair:
        return TokenPair(
            access_token=body["access_token"],
            refresh_token=body["refresh_token"],
            expires_in=int(body.get("expires_in") or 0),
        )

    def register(self, store, name, email, password, role):
        # Reject bad input and duplicates before the provider sees anything
        raise_for_errors(validate_user_fields({"name": name, "email": email, "password": password}, creating=True))
        if store.find_by_email(email):
            raise ConflictError("User with this email already exists")

        resp = self._request(
            "POST",
            "/signup",
            json={
                "email": normalize_email(email),
                "password": password,
                "data": {"full_name": name, "user_type": role},
            },
        )
        if resp.is_error:
            logger.warning("supabase signup rejected | status=%d", resp.status_code)
            raise ValidationError(self._error_text(resp))

        body = resp.json()
        # With e-mail confirmation on, GoTrue returns the bare user object
        remote_user = body.get("user") or body
        return store.create_user(
            name=name,
            email=email,
            role=role,
            is_email_verified=remote_user.get("email_confirmed_at") is not None,
            supabase_id=remote_user["id"],
        )

    def authenticate(self, store, email, password):
        resp = self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": normalize_email(email), "password": password},
        )
        if resp.is_error:
            raise AuthError(_LOGIN_FAIL)

        body = resp.json()
        user = self.resolve_user(store, self._identity(body["user"]))
        if not user.is_active:
            raise AuthError("Account disabled")
        return user, self._tokens(body)

    def verify_token(self, token):
        resp = self._request("GET", "/user", token=token)
        if resp.is_error:
            raise AuthError("Invalid token")
        return self._identity(resp.json())

    def resolve_user(self, store, identity):
        """Find the local profile for *identity*, linking or provisioning it as needed."""
        user = store.find_by_external_id("supabase_id", identity.subject)
        if user:
            return user

        # Phone sign-ins carry no email to key a profile on
        if not identity.email:
            raise AuthError("Invalid token")

        user = store.find_by_email(identity.email)
        if user:
            # An unconfirmed address proves nothing about who owns the profile
            if not identity.email_verified:
                logger.warning("refused to link unverified external identity | provider=%s", identity.provider)
                raise AuthError("Email address is not verified")
            return store.link_external_identity(user, "supabase_id", identity.subject)

        meta = identity.metadata
        name = (meta.get("full_name") or meta.get("name") or identity.email.split("@")[0])[:50]
        role = meta.get("user_type") if meta.get("user_type") in SIGNUP_ROLES else "entrepreneur"
        logger.info("provisioning profile for external identity | provider=%s", identity.provider)
        return store.create_user(
            name=name,
            email=identity.email,
            role=role,
            is_email_verified=identity.email_verified,
            supabase_id=identity.subject,
        )

    def refresh(self, store, refresh_token):
        resp = self._request(
            "POST",
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        if resp.is_error:
            raise AuthError("Invalid token")
        return self._tokens(resp.json())

    def revoke(self, token):
        resp = self._request("POST", "/logout", token=token)
        if resp.is_error:
            raise ValidationError(self._error_text(resp))

    def oauth_url(self, provider):
        if provider not in OAUTH_PROVIDERS:
            raise ValidationError(f"Unsupported OAuth provider: {provider}")
        query = urlencode(
            {"provider": OAUTH_PROVIDERS[provider], "redirect_to": f"{self._frontend_url}/dashboard"}
        )
        return f"{self._base_url}/authorize?{query}"


def build_identity_provider(
    settings: Settings, transport: httpx.BaseTransport | None = None
) -> IdentityProvider:
    if settings.auth_provider == "local":
        return LocalIdentityProvider(settings)
    if settings.auth_provider == "supabase":
        return SupabaseIdentityProvider(settings, transport=transport)
    raise RuntimeError(f"Unknown AUTH_PROVIDER: {settings.auth_provider!r}")

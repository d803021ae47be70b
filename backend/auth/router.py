# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – signup, login, logout, token refresh, current user, OAuth.

Security notes
--------------
* Login returns the *same* error message whether the email doesn't exist or
  the password is wrong.  This prevents user-enumeration attacks.
* All input is validated before the identity provider or the store is
  called.
* The password hash never leaves this module: every response is built from
  :class:`users.schemas.UserResponse`.
"""

from fastapi import APIRouter, Depends, Request, status

from auth.dependencies import get_current_user, get_identity_provider
from auth.providers import IdentityProvider, OAUTH_PROVIDERS
from auth.schemas import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    OAuthUrlResponse,
    RefreshRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)
from core.errors import ValidationError
from core.logger import logger
from core.security import get_client_ip
from models.user import SIGNUP_ROLES, User
from users.schemas import UserResponse
from users.store import (
    FieldError,
    IdentityStore,
    get_store,
    is_valid_email,
    normalize_email,
    raise_for_errors,
    validate_user_fields,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def _validate_signup(body: SignupRequest) -> list[FieldError]:
    """
    Return the field errors for a signup payload (empty when acceptable).

    Signup is stricter than the store: names need at least two characters
    and only the self-service roles may be requested.
    """
    errors = validate_user_fields(
        {"name": body.full_name, "email": body.email, "password": body.password},
        creating=True,
    )
    if body.full_name.strip() and len(body.full_name.strip()) < 2:
        errors.append(FieldError("fullName", "Full name must be at least 2 characters"))
    if body.user_type not in SIGNUP_ROLES:
        errors.append(FieldError("userType", f"User type must be one of: {', '.join(SIGNUP_ROLES)}"))
    return errors


# ---------------------------------------------------------------------------
# POST /auth/signup
# ---------------------------------------------------------------------------


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    request: Request,
    provider: IdentityProvider = Depends(get_identity_provider),
    store: IdentityStore = Depends(get_store),
):
    """Register a new account with the configured identity provider."""
    raise_for_errors(_validate_signup(body))

    user = provider.register(
        store,
        name=body.full_name.strip(),
        email=body.email,
        password=body.password,
        role=body.user_type,
    )
    store.audit("user_signup", target_user_id=user.id, detail=f"provider={provider.name}", request_ip=get_client_ip(request))

    return SignupResponse(
        message="User registered successfully! Please check your email to verify your account.",
        user=UserResponse.from_user(user),
    )


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    request: Request,
    provider: IdentityProvider = Depends(get_identity_provider),
    store: IdentityStore = Depends(get_store),
):
    """Authenticate and return an access / refresh token pair."""
    email = normalize_email(body.email)
    errors = []
    if not is_valid_email(email):
        errors.append(FieldError("email", "Please add a valid email"))
    if not body.password:
        errors.append(FieldError("password", "Password is required"))
    raise_for_errors(errors)

    user, tokens = provider.authenticate(store, email, body.password)

    # Record login timestamp and audit event
    store.record_login(user)
    store.audit("user_login", target_user_id=user.id, request_ip=get_client_ip(request))

    return LoginResponse(
        message="Login successful",
        user=UserResponse.from_user(user),
        token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
    )


# ---------------------------------------------------------------------------
# POST /auth/logout
# ---------------------------------------------------------------------------


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    current_user: User = Depends(get_current_user),
    provider: IdentityProvider = Depends(get_identity_provider),
    store: IdentityStore = Depends(get_store),
):
    """End the caller's session with the identity provider."""
    provider.revoke(request.state.token)
    store.audit("user_logout", target_user_id=current_user.id, request_ip=get_client_ip(request))
    return MessageResponse(message="Logged out successfully")


# ---------------------------------------------------------------------------
# POST /auth/refresh
# ---------------------------------------------------------------------------


@router.post("/refresh", response_model=TokenResponse)
def refresh(
    body: RefreshRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
    store: IdentityStore = Depends(get_store),
):
    """Swap a refresh token for a fresh token pair."""
    tokens = provider.refresh(store, body.refresh_token)
    return TokenResponse(
        token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
    )


# ---------------------------------------------------------------------------
# GET /auth/me
# ---------------------------------------------------------------------------


@router.get("/me", response_model=MeResponse)
def me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's profile (no secrets)."""
    return MeResponse(user=UserResponse.from_user(current_user))


# ---------------------------------------------------------------------------
# POST /auth/oauth/{provider_name}
# ---------------------------------------------------------------------------


@router.post("/oauth/{provider_name}", response_model=OAuthUrlResponse)
def oauth(provider_name: str, provider: IdentityProvider = Depends(get_identity_provider)):
    """
    Return the URL the browser should follow to sign in with Google or
    LinkedIn.  The provider redirects back to ``{FRONTEND_URL}/dashboard``
    with a session; the first ``/auth/me`` call then provisions the profile.
    """
    if provider_name not in OAUTH_PROVIDERS:
        raise ValidationError(f"Unsupported OAuth provider: {provider_name}")

    url = provider.oauth_url(provider_name)
    logger.info("oauth redirect issued | provider=%s", provider_name)
    return OAuthUrlResponse(auth_url=url)

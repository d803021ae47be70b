# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Profile endpoints.

* ``GET  /users/me/profile``  – the caller's full record
* ``PUT  /users/me/profile``  – partial update; a password change needs the
  current password, exactly like a change-password form
* ``GET  /users/{user_id}``   – another member's public profile
"""

from fastapi import APIRouter, Depends, Request

from auth.dependencies import get_current_user
from core.errors import NotFoundError, ValidationError
from core.security import get_client_ip
from models.user import User
from users.schemas import ProfileUpdateRequest, PublicProfileResponse, UserResponse
from users.store import IdentityStore, get_store

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me/profile", response_model=UserResponse)
def get_my_profile(current_user: User = Depends(get_current_user)):
    return UserResponse.from_user(current_user)


@router.put("/me/profile", response_model=UserResponse)
def update_my_profile(
    body: ProfileUpdateRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    store: IdentityStore = Depends(get_store),
):
    """Apply the supplied fields only; omitted fields are left untouched."""
    patch = body.model_dump(exclude_unset=True, exclude={"current_password"})

    if patch.get("password") is not None:
        if current_user.supabase_id:
            raise ValidationError("Password is managed by the external identity provider")
        # Accounts created through OAuth may set a first password freely
        if current_user.password_hash and not current_user.match_password(body.current_password or ""):
            raise ValidationError("Current password is incorrect")

    user = store.update_profile(current_user.id, patch)

    # Never record the password itself, only that it changed
    store.audit(
        "profile_update",
        target_user_id=user.id,
        detail="fields=" + ",".join(sorted(patch)),
        request_ip=get_client_ip(request),
    )
    return UserResponse.from_user(user)


@router.get("/{user_id}", response_model=PublicProfileResponse)
def get_public_profile(
    user_id: int,
    current_user: User = Depends(get_current_user),
    store: IdentityStore = Depends(get_store),
):
    user = store.find_by_id(user_id)
    if not user or not user.is_active:
        raise NotFoundError("User not found")
    return PublicProfileResponse.from_user(user)

# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for user records and profiles."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from models.user import User

# JSON on the wire is camelCase; Python attributes stay snake_case.
CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


# -- Requests --------------------------------------------------------------


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    location: Optional[str] = None
    experience: Optional[str] = None
    avatar: Optional[str] = None
    # Changing the password requires the current one
    password: Optional[str] = None
    current_password: Optional[str] = None

    model_config = CAMEL


# -- Responses -------------------------------------------------------------


class ProfileOut(BaseModel):
    bio: Optional[str] = None
    skills: List[str] = []
    interests: List[str] = []
    location: Optional[str] = None
    experience: str = "beginner"
    avatar: str = ""

    model_config = {**CAMEL, "from_attributes": True}


class UserResponse(BaseModel):
    """Everything a user may see about themself.  Never carries the hash."""

    id: int
    email: str
    full_name: str
    user_type: str
    email_verified: bool
    is_active: bool
    profile: ProfileOut
    idea_ids: List[str] = []
    mentorship_ids: List[str] = []
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = CAMEL

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.name,
            user_type=user.role,
            email_verified=user.is_email_verified,
            is_active=user.is_active,
            profile=ProfileOut.model_validate(user),
            idea_ids=[str(i) for i in user.idea_ids or []],
            mentorship_ids=[str(i) for i in user.mentorship_ids or []],
            last_login=user.last_login,
            created_at=user.created_at,
        )


class PublicProfileResponse(BaseModel):
    """What other members can see: no e-mail, no account flags."""

    id: int
    full_name: str
    user_type: str
    profile: ProfileOut

    model_config = CAMEL

    @classmethod
    def from_user(cls, user: User) -> "PublicProfileResponse":
        return cls(
            id=user.id,
            full_name=user.name,
            user_type=user.role,
            profile=ProfileOut.model_validate(user),
        )

# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""User ORM model."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, Integer, String
from sqlalchemy.sql import func

from core.security import hash_password, verify_password
from database import Base

ROLES = ("entrepreneur", "mentor", "admin")
# Admins are only ever created by bin/seed_admin.py or promoted by an admin
SIGNUP_ROLES = ("entrepreneur", "mentor")
EXPERIENCE_LEVELS = ("beginner", "intermediate", "advanced", "expert")

_AVATAR_URL = "https://ui-avatars.com/api/?name={initials}&background=random&color=fff&size=200"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # NULL only for accounts backed by an external identity
    password_hash = Column(String(255), nullable=True)
    role = Column(Enum(*ROLES, name="user_role"), nullable=False, default="entrepreneur")

    # -- profile -----------------------------------------------------------
    bio = Column(String(500), nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    interests = Column(JSON, nullable=False, default=list)
    location = Column(String(255), nullable=True)
    experience = Column(
        Enum(*EXPERIENCE_LEVELS, name="experience_level"),
        nullable=False,
        default="beginner",
    )
    avatar = Column(String(2048), nullable=False, default="")

    # -- external identities -----------------------------------------------
    google_id = Column(String(255), unique=True, nullable=True)
    linkedin_id = Column(String(255), unique=True, nullable=True)
    supabase_id = Column(String(255), unique=True, nullable=True, index=True)

    # -- status --------------------------------------------------------------
    is_email_verified = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Ideas and mentorships are owned elsewhere; only their ids live here.
    idea_ids = Column(JSON, nullable=False, default=list)
    mentorship_ids = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    @property
    def has_external_identity(self) -> bool:
        return bool(self.google_id or self.linkedin_id or self.supabase_id)

    def set_password(self, plain: str, rounds: int) -> None:
        """Replace the stored digest.  The only code path that writes password_hash."""
        self.password_hash = hash_password(plain, rounds)

    def match_password(self, plain: str) -> bool:
        return verify_password(plain, self.password_hash)

    def generate_avatar(self) -> str:
        """Fill in an initials avatar when the user has not uploaded one."""
        if not self.avatar:
            initials = "".join(part[0] for part in (self.name or "").split()).upper()
            self.avatar = _AVATAR_URL.format(initials=initials)
        return self.avatar

# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Identity store – the only module that reads or writes ``users`` rows.

Validation is explicit: :func:`validate_user_fields` returns a list of
field errors and every write path calls it *before* touching the session.
Password digests are produced by ``User.set_password`` and only when a new
plaintext password is supplied, so an ordinary profile update never
re-hashes the stored digest.
"""

import re
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

from fastapi import Depends, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import ConflictError, NotFoundError, ValidationError
from core.logger import logger
from database import get_db
from models.audit_log import AuditLog
from models.user import EXPERIENCE_LEVELS, ROLES, User

# Every separator is followed by \w+; no nested optional repetition
EMAIL_PATTERN = re.compile(r"^\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*\.\w{2,3}$")
EMAIL_MAX = 255

NAME_MAX = 50
BIO_MAX = 500
PASSWORD_MIN = 6

EXTERNAL_ID_FIELDS = ("google_id", "linkedin_id", "supabase_id")

# Fields a profile patch may touch.  Everything else (role, flags, ids) has
# its own dedicated code path.
PROFILE_FIELDS = ("name", "bio", "skills", "interests", "location", "experience", "avatar", "password")
NULLABLE_PROFILE_FIELDS = ("bio", "location")


@dataclass
class FieldError:
    field: str
    message: str


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return len(email) <= EMAIL_MAX and EMAIL_PATTERN.match(email) is not None


def validate_user_fields(data: dict, creating: bool = False) -> list[FieldError]:
    """
    Check *data* against the user-record constraints.

    With ``creating=True`` the required fields (name, email, and a password
    unless an external identity id is present) must be present; otherwise
    only the keys that appear in *data* are checked.  Returns an empty list
    when everything is acceptable.
    """
    errors: list[FieldError] = []

    if creating or "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            errors.append(FieldError("name", "Please add a name"))
        elif len(name) > NAME_MAX:
            errors.append(FieldError("name", f"Name cannot be more than {NAME_MAX} characters"))

    if creating or "email" in data:
        email = normalize_email(data.get("email"))
        if not email:
            errors.append(FieldError("email", "Please add an email"))
        elif not is_valid_email(email):
            errors.append(FieldError("email", "Please add a valid email"))

    has_external = any(data.get(f) for f in EXTERNAL_ID_FIELDS)
    password = data.get("password")
    if creating and not password and not has_external:
        errors.append(FieldError("password", "Please add a password"))
    elif password is not None and len(password) < PASSWORD_MIN:
        errors.append(FieldError("password", f"Password must be at least {PASSWORD_MIN} characters"))

    if "role" in data and data["role"] not in ROLES:
        errors.append(FieldError("role", f"Role must be one of: {', '.join(ROLES)}"))

    if data.get("bio") is not None and len(data["bio"]) > BIO_MAX:
        errors.append(FieldError("bio", f"Bio cannot be more than {BIO_MAX} characters"))

    for key in ("skills", "interests"):
        value = data.get(key)
        if value is not None and (
            not isinstance(value, list) or not all(isinstance(v, str) for v in value)
        ):
            errors.append(FieldError(key, f"{key.capitalize()} must be a list of strings"))

    if data.get("experience") is not None and data["experience"] not in EXPERIENCE_LEVELS:
        errors.append(
            FieldError("experience", f"Experience must be one of: {', '.join(EXPERIENCE_LEVELS)}")
        )

    return errors


def raise_for_errors(errors: list[FieldError]) -> None:
    if errors:
        raise ValidationError("Validation failed", details=[asdict(e) for e in errors])


class IdentityStore:
    """CRUD over user records bound to one request-scoped session."""

    def __init__(self, db: Session, hash_rounds: int):
        self.db = db
        self.hash_rounds = hash_rounds

    # -- reads ---------------------------------------------------------------

    def find_by_id(self, user_id: int) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def find_by_external_id(self, field: str, value: str) -> User | None:
        if field not in EXTERNAL_ID_FIELDS:
            raise ValueError(f"unknown external identity field: {field}")
        return self.db.query(User).filter(getattr(User, field) == value).first()

    def list_users(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    # -- writes --------------------------------------------------------------

    def create_user(
        self,
        name: str,
        email: str,
        password: str | None = None,
        role: str = "entrepreneur",
        is_email_verified: bool = False,
        **external_ids: str,
    ) -> User:
        """
        Insert a user.  Exactly one of *password* or an external identity id
        (``google_id=``, ``linkedin_id=``, ``supabase_id=``) is required.

        Raises ValidationError on malformed fields and ConflictError when
        the e-mail is already registered.
        """
        unknown = set(external_ids) - set(EXTERNAL_ID_FIELDS)
        if unknown:
            raise ValueError(f"unknown external identity field(s): {sorted(unknown)}")

        fields = {"name": name, "email": email, "password": password, "role": role, **external_ids}
        raise_for_errors(validate_user_fields(fields, creating=True))

        email = normalize_email(email)
        if self.find_by_email(email):
            raise ConflictError("User with this email already exists")

        user = User(
            name=name.strip(),
            email=email,
            role=role,
            is_email_verified=is_email_verified,
            skills=[],
            interests=[],
            idea_ids=[],
            mentorship_ids=[],
            **external_ids,
        )
        if password:
            user.set_password(password, self.hash_rounds)
        user.generate_avatar()

        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same address
            self.db.rollback()
            raise ConflictError("User with this email already exists")
        self.db.refresh(user)

        logger.info("user created | id=%s role=%s", user.id, user.role)
        return user

    def update_profile(self, user_id: int, patch: dict) -> User:
        """
        Apply a partial profile update.  Only keys present in *patch* are
        written; the password is re-hashed only when ``password`` is one of
        them.
        """
        user = self.find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")

        unknown = set(patch) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationError(
                "Validation failed",
                details=[asdict(FieldError(key, "Field cannot be updated")) for key in sorted(unknown)],
            )
        # bio and location may be cleared; the other columns are NOT NULL
        patch = {k: v for k, v in patch.items() if v is not None or k in NULLABLE_PROFILE_FIELDS}
        raise_for_errors(validate_user_fields(patch))

        for key, value in patch.items():
            if key == "password":
                user.set_password(value, self.hash_rounds)
            elif key == "name":
                user.name = value.strip()
            elif key in ("skills", "interests"):
                setattr(user, key, [v.strip() for v in value if v.strip()])
            else:
                setattr(user, key, value)

        self.db.commit()
        self.db.refresh(user)
        return user

    def link_external_identity(self, user: User, field: str, value: str) -> User:
        if field not in EXTERNAL_ID_FIELDS:
            raise ValueError(f"unknown external identity field: {field}")
        setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        return user

    def record_login(self, user: User) -> None:
        user.last_login = datetime.now(timezone.utc)
        self.db.commit()

    def set_active(self, user: User, active: bool) -> None:
        user.is_active = active
        self.db.commit()

    def set_role(self, user: User, role: str) -> None:
        raise_for_errors(validate_user_fields({"role": role}))
        user.role = role
        self.db.commit()

    def audit(
        self,
        action: str,
        target_user_id: int | None = None,
        admin_id: int | None = None,
        detail: str | None = None,
        request_ip: str | None = None,
    ) -> None:
        self.db.add(
            AuditLog(
                admin_id=admin_id,
                target_user_id=target_user_id,
                action=action,
                detail=detail,
                request_ip=request_ip,
            )
        )
        self.db.commit()


def get_store(request: Request, db: Session = Depends(get_db)) -> IdentityStore:
    """FastAPI dependency: an IdentityStore bound to the request's session."""
    return IdentityStore(db, hash_rounds=request.app.state.settings.password_hash_rounds)

# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Admin endpoints – account lifecycle management.

Every endpoint in this router is guarded by ``require_admin``.  A request
that carries a valid token but belongs to an entrepreneur or mentor will
receive 403 before any business logic runs.

Accounts are never deleted: ``disable`` flips ``is_active`` so the user can
no longer log in and any outstanding tokens are rejected by the session
guard.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import aliased

from admin.schemas import (
    AdminActionResponse,
    AuditLogListResponse,
    AuditLogRow,
    ChangeRoleRequest,
    UserListResponse,
)
from auth.dependencies import require_admin
from core.errors import NotFoundError, ValidationError
from core.security import get_client_ip
from models.audit_log import AuditLog
from models.user import User
from users.schemas import UserResponse
from users.store import IdentityStore, get_store

router = APIRouter(prefix="/admin", tags=["admin"])


def _target(store: IdentityStore, user_id: int) -> User:
    target = store.find_by_id(user_id)
    if not target:
        raise NotFoundError("User not found")
    return target


# ---------------------------------------------------------------------------
# GET /admin/users  – list all users
# ---------------------------------------------------------------------------


@router.get("/users", response_model=UserListResponse)
def list_users(
    admin: User = Depends(require_admin),
    store: IdentityStore = Depends(get_store),
):
    """Return every user record (no password data – handled by the schema)."""
    return UserListResponse(users=[UserResponse.from_user(u) for u in store.list_users()])


# ---------------------------------------------------------------------------
# PUT /admin/users/{id}/disable  – soft-disable a user account
# ---------------------------------------------------------------------------


@router.put("/users/{user_id}/disable", response_model=AdminActionResponse)
def disable_user(
    user_id: int,
    request: Request,
    admin: User = Depends(require_admin),
    store: IdentityStore = Depends(get_store),
):
    """
    Set ``is_active = False``.

    Guard: an admin cannot disable their own account.
    """
    if user_id == admin.id:
        raise ValidationError("Cannot disable yourself")

    target = _target(store, user_id)
    store.set_active(target, False)
    store.audit("disable_user", target_user_id=user_id, admin_id=admin.id, request_ip=get_client_ip(request))
    return AdminActionResponse(message="User disabled")


# ---------------------------------------------------------------------------
# PUT /admin/users/{id}/enable  – re-activate a disabled user account
# ---------------------------------------------------------------------------


@router.put("/users/{user_id}/enable", response_model=AdminActionResponse)
def enable_user(
    user_id: int,
    request: Request,
    admin: User = Depends(require_admin),
    store: IdentityStore = Depends(get_store),
):
    """Set ``is_active = True`` so the user can log in again."""
    target = _target(store, user_id)
    store.set_active(target, True)
    store.audit("enable_user", target_user_id=user_id, admin_id=admin.id, request_ip=get_client_ip(request))
    return AdminActionResponse(message="User enabled")


# ---------------------------------------------------------------------------
# PUT /admin/users/{id}/change-role  – promote or demote a user
# ---------------------------------------------------------------------------


@router.put("/users/{user_id}/change-role", response_model=AdminActionResponse)
def change_role(
    user_id: int,
    body: ChangeRoleRequest,
    request: Request,
    admin: User = Depends(require_admin),
    store: IdentityStore = Depends(get_store),
):
    """
    Change the role of an existing user.  An admin cannot change their own
    role (prevents accidental self-lockout).
    """
    if user_id == admin.id:
        raise ValidationError("Cannot change your own role")

    target = _target(store, user_id)
    store.set_role(target, body.role)
    store.audit(
        "change_role",
        target_user_id=user_id,
        admin_id=admin.id,
        detail=f"new_role={body.role}",
        request_ip=get_client_ip(request),
    )
    return AdminActionResponse(message="Role updated")


# ---------------------------------------------------------------------------
# GET /admin/audit-logs  – audit trail with optional filters
# ---------------------------------------------------------------------------


@router.get("/audit-logs", response_model=AuditLogListResponse)
def list_audit_logs(
    emails: list[str] | None = Query(None, description="Filter by exact email(s) – repeated param"),
    action: str | None = Query(None, description="Filter by action, e.g. user_login"),
    since: datetime | None = Query(None, description="ISO-8601 start of time window"),
    until: datetime | None = Query(None, description="ISO-8601 end of time window"),
    limit: int = Query(200, ge=1, le=1000),
    admin: User = Depends(require_admin),
    store: IdentityStore = Depends(get_store),
):
    """
    Return audit log rows newest-first.  ``emails`` matches rows where
    *either* the acting admin or the target user has one of the addresses.
    """
    AdminUser = aliased(User)
    TargetUser = aliased(User)

    q = (
        store.db.query(AuditLog, AdminUser.email, TargetUser.email)
        .outerjoin(AdminUser, AuditLog.admin_id == AdminUser.id)
        .outerjoin(TargetUser, AuditLog.target_user_id == TargetUser.id)
    )

    if emails:
        q = q.filter(AdminUser.email.in_(emails) | TargetUser.email.in_(emails))
    if action:
        q = q.filter(AuditLog.action == action)
    if since:
        q = q.filter(AuditLog.created_at >= since)
    if until:
        q = q.filter(AuditLog.created_at <= until)

    rows = q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()

    return AuditLogListResponse(
        logs=[
            AuditLogRow(
                id=log.id,
                admin_email=admin_email,
                target_email=target_email,
                action=log.action,
                detail=log.detail,
                request_ip=log.request_ip,
                created_at=log.created_at,
            )
            for log, admin_email, target_email in rows
        ]
    )

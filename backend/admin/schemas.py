# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the admin endpoints."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from users.schemas import CAMEL, UserResponse


# -- Requests --------------------------------------------------------------


class ChangeRoleRequest(BaseModel):
    role: str  # "entrepreneur", "mentor" or "admin"


# -- Responses -------------------------------------------------------------


class UserListResponse(BaseModel):
    users: List[UserResponse]


class AdminActionResponse(BaseModel):
    message: str


# -- Audit log responses ---------------------------------------------------


class AuditLogRow(BaseModel):
    id: int
    admin_email: Optional[str] = None       # resolved from admin_id join
    target_email: Optional[str] = None      # resolved from target_user_id join
    action: str
    detail: Optional[str] = None
    request_ip: Optional[str] = None
    created_at: datetime

    model_config = {**CAMEL, "from_attributes": True}


class AuditLogListResponse(BaseModel):
    logs: List[AuditLogRow]

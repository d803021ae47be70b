# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from pydantic import BaseModel

from users.schemas import CAMEL, UserResponse


# -- Requests --------------------------------------------------------------


class SignupRequest(BaseModel):
    email: str = ""
    password: str = ""
    full_name: str = ""
    user_type: str = "entrepreneur"

    model_config = CAMEL


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class RefreshRequest(BaseModel):
    refresh_token: str

    model_config = CAMEL


# -- Responses -------------------------------------------------------------


class SignupResponse(BaseModel):
    message: str
    user: UserResponse


class LoginResponse(BaseModel):
    message: str
    user: UserResponse
    token: str
    refresh_token: str
    expires_in: int

    model_config = CAMEL


class TokenResponse(BaseModel):
    token: str
    refresh_token: str
    expires_in: int

    model_config = CAMEL


class MeResponse(BaseModel):
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


class OAuthUrlResponse(BaseModel):
    auth_url: str

    model_config = CAMEL

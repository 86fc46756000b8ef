# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from datetime import datetime
from typing import Optional

from core.schemas import WireModel


# -- Requests --------------------------------------------------------------


class RegisterRequest(WireModel):
    username: str
    email: str
    password: str


class LoginRequest(WireModel):
    username: str
    password: str


class VerifyPasswordRequest(WireModel):
    current_password: str


class ChangePasswordRequest(WireModel):
    current_password: str
    new_password: str


# -- Responses -------------------------------------------------------------


class UserInfoResponse(WireModel):
    id: int
    username: str
    email: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime


class LoginResponse(WireModel):
    token: str
    token_type: str = "bearer"
    user: UserInfoResponse

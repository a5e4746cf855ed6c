"""
===============================================================================
TARJETA CRC — schemas/users.py
===============================================================================

Módulo:
    Schemas HTTP para el directorio de usuarios y autenticación

Responsabilidades:
    - DTOs de login, cambio de password, alta y actualización de usuarios.
    - Responses públicas (sin password ni hash), roles y estadísticas.
===============================================================================
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class LoginReq(BaseModel):
    """`username` acepta también el email."""

    username: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=512)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        return v.strip()


class ChangePasswordReq(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=512)
    new_password: str = Field(..., min_length=1, max_length=512)


class PreferencesReq(BaseModel):
    theme: str = "light"
    language: str = "es"
    notifications: bool = True


class UserCreateReq(BaseModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None
    first_name: str = ""
    last_name: str = ""
    role: str | None = None
    preferences: PreferencesReq | None = None


class UserUpdateReq(BaseModel):
    """Solo se aplican los campos enviados (exclude_unset)."""

    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: str | None = None
    is_active: bool | None = None
    preferences: PreferencesReq | None = None


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------
class PreferencesRes(BaseModel):
    theme: str
    language: str
    notifications: bool


class UserRes(BaseModel):
    id: int
    username: str
    email: str
    role: str
    first_name: str
    last_name: str
    full_name: str
    is_active: bool
    is_locked: bool
    login_attempts: int
    created_at: datetime
    updated_at: datetime
    last_login: datetime | None
    preferences: PreferencesRes


class UserListRes(BaseModel):
    users: list[UserRes]
    count: int


class LoginRes(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserRes


class VerifyRes(BaseModel):
    user: UserRes
    token_valid: bool = True


class RoleRes(BaseModel):
    name: str
    display_name: str
    permissions: list[str]


class UserStatisticsRes(BaseModel):
    total_users: int
    active_users: int
    locked_users: int
    users_by_role: dict[str, int]
    recent_logins: int

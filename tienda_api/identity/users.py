"""
===============================================================================
TARJETA CRC — identity/users.py
===============================================================================

Módulo:
    Modelos de Usuario (registro interno + proyección pública)

Responsabilidades:
    - Definir el enum de roles soportados.
    - Definir User (interno, con password_hash) y PublicUser (sin secretos).
    - Validar username / email / rol reportando todas las violaciones.

Colaboradores:
    - infrastructure/repositories/in_memory/user.py: crea y muta User.
    - identity/auth_users.py: usa User para autenticar y emitir JWT.
    - api/user_routes.py: serializa PublicUser.

Notas:
    - PublicUser NUNCA lleva password ni hash; to_public_user() es la única
      conversión entre ambos.
===============================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50

USER_UPDATABLE_FIELDS: tuple[str, ...] = (
    "email",
    "first_name",
    "last_name",
    "role",
    "is_active",
    "preferences",
)


class UserRole(str, Enum):
    """Roles soportados (ver identity/rbac.py para sus permisos)."""

    ADMIN = "admin"
    MANAGER = "manager"
    SELLER = "seller"
    USER = "user"
    GUEST = "guest"


@dataclass(frozen=True, slots=True)
class UserPreferences:
    theme: str = "light"
    language: str = "es"
    notifications: bool = True

    @classmethod
    def from_data(
        cls, data: UserPreferences | Mapping[str, Any] | None
    ) -> UserPreferences:
        if data is None:
            return cls()
        if isinstance(data, UserPreferences):
            return data
        base = cls()
        return cls(
            theme=data.get("theme", base.theme),
            language=data.get("language", base.language),
            notifications=bool(data.get("notifications", base.notifications)),
        )


@dataclass
class User:
    """Registro interno de usuario. Lleva el hash Argon2 del password."""

    id: int
    username: str
    email: str
    password_hash: str
    role: str
    created_at: datetime
    updated_at: datetime
    first_name: str = ""
    last_name: str = ""
    is_active: bool = True
    is_locked: bool = False
    login_attempts: int = 0
    last_login: datetime | None = None
    preferences: UserPreferences = field(default_factory=UserPreferences)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.username


@dataclass(frozen=True, slots=True)
class PublicUser:
    """Proyección pública: sin password ni hash."""

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
    preferences: UserPreferences


def to_public_user(user: User) -> PublicUser:
    return PublicUser(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        first_name=user.first_name,
        last_name=user.last_name,
        full_name=user.full_name,
        is_active=user.is_active,
        is_locked=user.is_locked,
        login_attempts=user.login_attempts,
        created_at=user.created_at,
        updated_at=user.updated_at,
        last_login=user.last_login,
        preferences=user.preferences,
    )


def is_valid_role(role: Any) -> bool:
    return isinstance(role, str) and role in {r.value for r in UserRole}


def validate_user_fields(*, username: Any, email: Any, role: Any) -> list[str]:
    """Valida username / email / rol. El password lo valida PasswordPolicy."""
    errors: list[str] = []

    if not isinstance(username, str) or not (
        USERNAME_MIN_LENGTH <= len(username.strip()) <= USERNAME_MAX_LENGTH
    ):
        errors.append(
            f"El username debe tener entre {USERNAME_MIN_LENGTH} "
            f"y {USERNAME_MAX_LENGTH} caracteres"
        )
    elif not USERNAME_PATTERN.match(username):
        errors.append("El username solo puede contener letras, números y guiones bajos")

    if not isinstance(email, str) or not EMAIL_PATTERN.match(email):
        errors.append("Email inválido")

    if not is_valid_role(role):
        errors.append("Rol inválido")

    return errors


def validate_user_profile(
    *, first_name: Any, last_name: Any, is_active: Any, preferences: Any
) -> list[str]:
    """Tipos de nombres, is_active y preferences (None no es un objeto válido)."""
    errors: list[str] = []

    if not isinstance(first_name, str):
        errors.append("El nombre debe ser texto")
    if not isinstance(last_name, str):
        errors.append("El apellido debe ser texto")
    if not isinstance(is_active, bool):
        errors.append("is_active debe ser booleano")

    if isinstance(preferences, UserPreferences):
        return errors
    if not isinstance(preferences, Mapping):
        errors.append("Las preferencias deben ser un objeto")
        return errors
    for key in ("theme", "language"):
        if key in preferences and not isinstance(preferences[key], str):
            errors.append(f"preferences.{key} debe ser texto")
    if "notifications" in preferences and not isinstance(
        preferences["notifications"], bool
    ):
        errors.append("preferences.notifications debe ser booleano")

    return errors


@dataclass(frozen=True, slots=True)
class UserStatistics:
    total_users: int
    active_users: int
    locked_users: int
    users_by_role: dict[str, int]
    recent_logins: int

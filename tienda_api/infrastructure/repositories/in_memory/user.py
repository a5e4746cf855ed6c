"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Ser dueño exclusivo de la colección de usuarios.
  - CRUD con unicidad case-insensitive de username y email.
  - Máquina de estados de bloqueo (Normal <-> Locked) por intentos fallidos.
  - Hashear passwords (Argon2) y verificarlos en tiempo constante.
  - Resolver permisos vía la tabla de roles.

Collaborators:
  - identity.users: User, PublicUser, validate_user_fields
  - identity.password_policy: PasswordPolicy
  - identity.rbac: ROLES, role_has_permission
  - domain.query: UserQuery, filter_users, sort_users
  - argon2.PasswordHasher

Constraints / Notes:
  - Thread-safe: un Lock por repositorio.
  - Desactivar NO borra: is_active=False, el registro queda para siempre.
  - Hacia afuera viaja PublicUser; solo find_for_auth devuelve el registro
    completo (copia) para el flujo de autenticación.
============================================================
"""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Callable, Iterable, Mapping

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from ....crosscutting.exceptions import (
    ConflictError,
    PolicyViolationError,
    ValidationError,
)
from ....crosscutting.logger import logger
from ....crosscutting.metrics import record_account_locked
from ....domain.entities import parse_entity_id
from ....domain.query import UserQuery, filter_users, sort_users, user_matches_text
from ....identity.password_policy import PasswordPolicy
from ....identity.rbac import ROLES, Role, role_has_permission
from ....identity.users import (
    USER_UPDATABLE_FIELDS,
    PublicUser,
    User,
    UserPreferences,
    UserRole,
    UserStatistics,
    to_public_user,
    validate_user_fields,
    validate_user_profile,
)

Clock = Callable[[], datetime]

DEFAULT_MAX_LOGIN_ATTEMPTS = 5
RECENT_LOGIN_WINDOW = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _role_value(role: Any) -> Any:
    return role.value if isinstance(role, UserRole) else role


def _casefold(value: Any) -> str | None:
    return value.lower() if isinstance(value, str) else None


class InMemoryUserRepository:
    """
    Repositorio in-memory, thread-safe, para usuarios.

    Modelo mental:
    - _users es la "tabla" en memoria, en orden de inserción.
    - El umbral de bloqueo y la política de password se inyectan (settings).
    """

    def __init__(
        self,
        seed: Iterable[Mapping[str, Any]] = (),
        *,
        password_hasher: PasswordHasher | None = None,
        password_policy: PasswordPolicy | None = None,
        max_login_attempts: int = DEFAULT_MAX_LOGIN_ATTEMPTS,
        clock: Clock | None = None,
    ) -> None:
        self._lock = Lock()
        self._hasher = password_hasher or PasswordHasher()
        self._policy = password_policy or PasswordPolicy()
        self._max_login_attempts = max_login_attempts
        self._clock: Clock = clock or _utcnow

        now = self._clock()
        self._users: list[User] = [self._from_seed(record, now) for record in seed]
        self._next_id = max((u.id for u in self._users), default=0) + 1

    def _from_seed(self, record: Mapping[str, Any], now: datetime) -> User:
        """R: Las semillas traen password plano o hash ya calculado."""
        password_hash = record.get("password_hash") or self._hasher.hash(
            record["password"]
        )
        created_at = _parse_timestamp(record.get("created_at")) or now
        return User(
            id=int(record["id"]),
            username=record["username"],
            email=record["email"],
            password_hash=password_hash,
            role=_role_value(record.get("role", UserRole.USER.value)),
            first_name=record.get("first_name") or "",
            last_name=record.get("last_name") or "",
            is_active=bool(record.get("is_active", True)),
            is_locked=bool(record.get("is_locked", False)),
            login_attempts=int(record.get("login_attempts") or 0),
            created_at=created_at,
            updated_at=_parse_timestamp(record.get("updated_at")) or created_at,
            last_login=_parse_timestamp(record.get("last_login")),
            preferences=UserPreferences.from_data(record.get("preferences")),
        )

    # =========================================================
    # Helpers internos
    # =========================================================
    @property
    def max_login_attempts(self) -> int:
        return self._max_login_attempts

    @property
    def password_policy(self) -> PasswordPolicy:
        return self._policy

    def _touch(self, user: User) -> None:
        now = self._clock()
        if now <= user.updated_at:
            now = user.updated_at + timedelta(microseconds=1)
        user.updated_at = now

    def _find_index(self, user_id: Any) -> int | None:
        uid = parse_entity_id(user_id)
        if uid is None:
            return None
        for index, user in enumerate(self._users):
            if user.id == uid:
                return index
        return None

    def _find(self, user_id: Any) -> User | None:
        index = self._find_index(user_id)
        return None if index is None else self._users[index]

    def _snapshot(self) -> list[User]:
        with self._lock:
            return [replace(u) for u in self._users]

    def _email_taken(self, email: str, *, exclude_id: int | None = None) -> bool:
        needle = email.lower()
        return any(
            u.email.lower() == needle and u.id != exclude_id for u in self._users
        )

    # =========================================================
    # Lecturas
    # =========================================================
    def list_users(self, query: UserQuery | None = None) -> list[PublicUser]:
        """Incluye inactivos y bloqueados salvo que la query los filtre."""
        query = query or UserQuery()
        errors = query.validate()
        if errors:
            raise ValidationError("Filtros inválidos", errors)
        matched = sort_users(filter_users(self._snapshot(), query), query.sort_by)
        return [to_public_user(u) for u in matched]

    def search_users(self, term: str) -> list[PublicUser]:
        return [
            to_public_user(u)
            for u in self._snapshot()
            if user_matches_text(u, term or "")
        ]

    def get_user(self, user_id: Any) -> PublicUser | None:
        with self._lock:
            user = self._find(user_id)
            return to_public_user(user) if user else None

    def get_user_by_username(self, username: str) -> PublicUser | None:
        needle = _casefold(username)
        with self._lock:
            for user in self._users:
                if user.username.lower() == needle:
                    return to_public_user(user)
        return None

    def get_user_by_email(self, email: str) -> PublicUser | None:
        needle = _casefold(email)
        with self._lock:
            for user in self._users:
                if user.email.lower() == needle:
                    return to_public_user(user)
        return None

    def find_for_auth(self, identifier: str) -> User | None:
        """
        Busca por username O email (case-insensitive) y devuelve el registro
        completo (copia). Uso interno de autenticación únicamente.
        """
        needle = _casefold(identifier)
        if not needle:
            return None
        with self._lock:
            for user in self._users:
                if user.username.lower() == needle or user.email.lower() == needle:
                    return replace(user)
        return None

    def verify_password(self, user_id: Any, password: str) -> bool:
        with self._lock:
            user = self._find(user_id)
            password_hash = user.password_hash if user else None
        if password_hash is None or not isinstance(password, str):
            return False
        try:
            return self._hasher.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False

    def has_permission(self, user_id: Any, permission: str) -> bool:
        """False si el usuario no existe o está inactivo."""
        with self._lock:
            user = self._find(user_id)
            if user is None or not user.is_active:
                return False
            role = user.role
        return role_has_permission(role, permission)

    def roles(self) -> list[Role]:
        return list(ROLES.values())

    def statistics(self) -> UserStatistics:
        users = self._snapshot()
        since = self._clock() - RECENT_LOGIN_WINDOW
        return UserStatistics(
            total_users=len(users),
            active_users=sum(1 for u in users if u.is_active),
            locked_users=sum(1 for u in users if u.is_locked),
            users_by_role=dict(Counter(u.role for u in users)),
            recent_logins=sum(
                1 for u in users if u.last_login is not None and u.last_login > since
            ),
        )

    # =========================================================
    # Mutaciones (CRUD)
    # =========================================================
    def create_user(self, data: Mapping[str, Any]) -> PublicUser:
        """
        Alta de usuario.

        Orden: unicidad (ConflictError) -> validación completa (ValidationError).
        """
        username = data.get("username")
        email = data.get("email")
        password = data.get("password")
        role = _role_value(data.get("role") or UserRole.USER.value)

        with self._lock:
            if isinstance(username, str) and any(
                u.username.lower() == username.lower() for u in self._users
            ):
                raise ConflictError("Username ya existe", field_name="username")
            if isinstance(email, str) and self._email_taken(email):
                raise ConflictError("Email ya existe", field_name="email")

            errors = validate_user_fields(username=username, email=email, role=role)
            errors.extend(
                validate_user_profile(
                    first_name=data.get("first_name") or "",
                    last_name=data.get("last_name") or "",
                    is_active=True,
                    preferences=data.get("preferences") or {},
                )
            )
            errors.extend(self._policy.violations(password))
            if errors:
                raise ValidationError("Datos de usuario inválidos", errors)

            now = self._clock()
            user = User(
                id=self._next_id,
                username=username,
                email=email,
                password_hash=self._hasher.hash(password),
                role=role,
                first_name=data.get("first_name") or "",
                last_name=data.get("last_name") or "",
                created_at=now,
                updated_at=now,
                preferences=UserPreferences.from_data(data.get("preferences")),
            )
            self._users.append(user)
            self._next_id += 1

        logger.info("Usuario creado", extra={"user_id": user.id, "role": user.role})
        return to_public_user(user)

    def update_user(self, user_id: Any, changes: Mapping[str, Any]) -> PublicUser | None:
        """Campos permitidos: email, nombres, rol, is_active, preferences."""
        with self._lock:
            index = self._find_index(user_id)
            if index is None:
                return None
            current = self._users[index]

            new_email = changes.get("email")
            if (
                isinstance(new_email, str)
                and new_email != current.email
                and self._email_taken(new_email, exclude_id=current.id)
            ):
                raise ConflictError("Email ya existe", field_name="email")

            # R: Se valida el payload crudo; el registro vivo no se toca si falla.
            errors = validate_user_fields(
                username=current.username,
                email=changes.get("email", current.email),
                role=_role_value(changes.get("role", current.role)),
            )
            errors.extend(
                validate_user_profile(
                    first_name=changes.get("first_name", current.first_name),
                    last_name=changes.get("last_name", current.last_name),
                    is_active=changes.get("is_active", current.is_active),
                    preferences=changes.get("preferences", current.preferences),
                )
            )
            if errors:
                raise ValidationError("Datos de actualización inválidos", errors)

            candidate = replace(current)
            for name in USER_UPDATABLE_FIELDS:
                if name not in changes:
                    continue
                value = changes[name]
                if name == "role":
                    value = _role_value(value)
                elif name == "preferences":
                    value = UserPreferences.from_data(value)
                setattr(candidate, name, value)

            self._touch(candidate)
            self._users[index] = candidate

        logger.info(
            "Usuario actualizado",
            extra={"user_id": candidate.id, "fields": sorted(changes)},
        )
        return to_public_user(candidate)

    def deactivate_user(self, user_id: Any) -> bool:
        """Soft delete. False solo si el usuario no existe."""
        with self._lock:
            user = self._find(user_id)
            if user is None:
                return False
            user.is_active = False
            self._touch(user)

        logger.info("Usuario desactivado", extra={"user_id": user.id})
        return True

    def change_password(self, user_id: Any, new_password: str) -> bool:
        """Aplica la política completa antes de re-hashear."""
        violations = self._policy.violations(new_password)
        if violations:
            raise PolicyViolationError(violations)

        new_hash = self._hasher.hash(new_password)
        with self._lock:
            user = self._find(user_id)
            if user is None:
                return False
            user.password_hash = new_hash
            self._touch(user)

        logger.info("Contraseña cambiada", extra={"user_id": user.id})
        return True

    # =========================================================
    # Máquina de estados de bloqueo
    # =========================================================
    def increment_login_attempts(self, user_id: Any) -> PublicUser | None:
        """Normal -> Locked cuando los intentos alcanzan el umbral."""
        with self._lock:
            user = self._find(user_id)
            if user is None:
                return None
            was_locked = user.is_locked
            user.login_attempts += 1
            if user.login_attempts >= self._max_login_attempts:
                user.is_locked = True
            self._touch(user)
            snapshot = to_public_user(user)

        if snapshot.is_locked and not was_locked:
            record_account_locked()
            logger.warning(
                "Cuenta bloqueada por intentos fallidos",
                extra={"user_id": snapshot.id, "attempts": snapshot.login_attempts},
            )
        else:
            logger.info(
                "Intento de login fallido",
                extra={
                    "user_id": snapshot.id,
                    "attempts": snapshot.login_attempts,
                    "max_attempts": self._max_login_attempts,
                },
            )
        return snapshot

    def record_successful_login(self, user_id: Any) -> PublicUser | None:
        """
        Resetea intentos y sella last_login.

        El estado se re-lee bajo el lock: si la cuenta quedó bloqueada o inactiva
        mientras se verificaba el password, no se muta y se devuelve ese estado.
        """
        with self._lock:
            user = self._find(user_id)
            if user is None:
                return None
            if user.is_locked or not user.is_active:
                return to_public_user(user)
            user.login_attempts = 0
            self._touch(user)
            user.last_login = user.updated_at
            snapshot = to_public_user(user)

        logger.info("Último login actualizado", extra={"user_id": snapshot.id})
        return snapshot

    def unlock_user(self, user_id: Any) -> PublicUser | None:
        """Locked -> Normal (intentos en 0)."""
        with self._lock:
            user = self._find(user_id)
            if user is None:
                return None
            user.is_locked = False
            user.login_attempts = 0
            self._touch(user)
            snapshot = to_public_user(user)

        logger.info("Usuario desbloqueado", extra={"user_id": snapshot.id})
        return snapshot

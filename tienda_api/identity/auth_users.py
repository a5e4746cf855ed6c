"""
===============================================================================
TARJETA CRC — identity/auth_users.py
===============================================================================

Módulo:
    Autenticación de Usuarios (JWT + bloqueo por intentos)

Responsabilidades:
    - Emitir y verificar JWT de acceso (TokenService, HS256).
    - Conducir la máquina de estados de bloqueo en cada login (AuthService).
    - Cambiar password verificando primero el actual.
    - Exponer dependencias FastAPI (require_user, require_permission).

Colaboradores:
    - crosscutting.config.get_settings: secreto, TTL e issuer.
    - crosscutting.exceptions: AuthenticationError con motivo.
    - crosscutting.metrics: resultados de login.
    - infrastructure.repositories.in_memory.user: lookup + transiciones de bloqueo.
    - container: provee la instancia de AuthService.

Decisiones de diseño:
    - Claims: sub, id, username, email, role, iat, exp, iss.
    - Usuario inexistente y password incorrecto dan el MISMO motivo
      (INVALID_CREDENTIALS).
    - No loguear secretos ni tokens; solo ids y motivos.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable

import jwt
from fastapi import Depends, Header, Request

from ..context import set_user_context
from ..crosscutting.config import Settings
from ..crosscutting.error_responses import forbidden
from ..crosscutting.exceptions import AuthenticationError, AuthFailureReason
from ..crosscutting.logger import logger
from ..crosscutting.metrics import record_login_attempt
from .rbac import Permission
from .users import PublicUser, User

if TYPE_CHECKING:
    from ..infrastructure.repositories.in_memory.user import InMemoryUserRepository

# ---------------------------------------------------------------------------
# Constantes (evitan strings mágicos)
# ---------------------------------------------------------------------------

JWT_ALGORITHM: str = "HS256"

CLAIM_SUB: str = "sub"
CLAIM_ID: str = "id"
CLAIM_USERNAME: str = "username"
CLAIM_EMAIL: str = "email"
CLAIM_ROLE: str = "role"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"
CLAIM_ISS: str = "iss"

_REQUIRED_CLAIMS = [CLAIM_SUB, CLAIM_IAT, CLAIM_EXP, CLAIM_ISS]


# ---------------------------------------------------------------------------
# Contratos internos
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """Payload mínimo que esperamos de un access token."""

    user_id: int
    username: str
    email: str
    role: str
    issued_at: int
    expires_at: int


@dataclass(frozen=True, slots=True)
class LoginResult:
    user: PublicUser
    access_token: str
    expires_in: int
    token_type: str = "bearer"


# ---------------------------------------------------------------------------
# Tokens JWT (emitir / verificar)
# ---------------------------------------------------------------------------


class TokenService:
    """Firma y verifica access tokens con PyJWT."""

    def __init__(self, secret: str, *, ttl_minutes: int, issuer: str) -> None:
        self._secret = secret
        self._ttl_seconds = int(ttl_minutes * 60)
        self._issuer = issuer

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenService:
        return cls(
            settings.jwt_secret,
            ttl_minutes=settings.jwt_access_ttl_minutes,
            issuer=settings.jwt_issuer,
        )

    def sign(self, user: User | PublicUser) -> tuple[str, int]:
        """Devuelve (token, expires_in_seconds)."""
        now = datetime.now(timezone.utc)
        payload: dict[str, object] = {
            CLAIM_SUB: str(user.id),
            CLAIM_ID: user.id,
            CLAIM_USERNAME: user.username,
            CLAIM_EMAIL: user.email,
            CLAIM_ROLE: user.role,
            CLAIM_IAT: int(now.timestamp()),
            CLAIM_EXP: int((now + timedelta(seconds=self._ttl_seconds)).timestamp()),
            CLAIM_ISS: self._issuer,
        }
        token = jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)
        return token, self._ttl_seconds

    def verify(self, token: str) -> TokenPayload:
        """
        Decodifica y valida firma, exp e issuer.

        Errores:
            AuthenticationError(TOKEN_EXPIRED | TOKEN_INVALID)
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                issuer=self._issuer,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError(AuthFailureReason.TOKEN_EXPIRED) from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError(AuthFailureReason.TOKEN_INVALID) from exc

        user_id = payload.get(CLAIM_ID)
        username = payload.get(CLAIM_USERNAME)
        role = payload.get(CLAIM_ROLE)
        if not isinstance(user_id, int) or not username or not role:
            raise AuthenticationError(AuthFailureReason.TOKEN_INVALID)
        if payload[CLAIM_SUB] != str(user_id):
            raise AuthenticationError(AuthFailureReason.TOKEN_INVALID)

        return TokenPayload(
            user_id=user_id,
            username=str(username),
            email=str(payload.get(CLAIM_EMAIL) or ""),
            role=str(role),
            issued_at=int(payload[CLAIM_IAT]),
            expires_at=int(payload[CLAIM_EXP]),
        )


# ---------------------------------------------------------------------------
# Servicio de autenticación
# ---------------------------------------------------------------------------


class AuthService:
    """
    Login con bloqueo por intentos, resolución de token y cambio de password.

    Máquina de estados (por usuario):
        Normal --(N-ésimo fallo)--> Locked --(unlock explícito)--> Normal
        Normal --(login OK)--> Normal (intentos en 0)
    """

    def __init__(self, users: InMemoryUserRepository, tokens: TokenService) -> None:
        self._users = users
        self._tokens = tokens

    @property
    def tokens(self) -> TokenService:
        return self._tokens

    def _reject(self, reason: AuthFailureReason, **extra: object) -> AuthenticationError:
        record_login_attempt(reason.value)
        logger.warning("Login rechazado", extra={"reason": reason.value, **extra})
        return AuthenticationError(reason)

    def authenticate(self, identifier: str, password: str) -> LoginResult:
        """Valida credenciales (username o email) y emite un token."""
        user = self._users.find_for_auth(identifier)
        if user is None:
            raise self._reject(AuthFailureReason.INVALID_CREDENTIALS)

        if not user.is_active:
            raise self._reject(AuthFailureReason.ACCOUNT_INACTIVE, user_id=user.id)

        # R: bloqueada rechaza incluso credenciales válidas.
        if user.is_locked:
            raise self._reject(AuthFailureReason.ACCOUNT_LOCKED, user_id=user.id)

        if not self._users.verify_password(user.id, password):
            self._users.increment_login_attempts(user.id)
            raise self._reject(AuthFailureReason.INVALID_CREDENTIALS, user_id=user.id)

        public = self._users.record_successful_login(user.id)
        if public is None:
            raise self._reject(AuthFailureReason.INVALID_CREDENTIALS, user_id=user.id)
        # R: Estado re-leído bajo el lock del repositorio; Locked nunca emite token.
        if not public.is_active:
            raise self._reject(AuthFailureReason.ACCOUNT_INACTIVE, user_id=user.id)
        if public.is_locked:
            raise self._reject(AuthFailureReason.ACCOUNT_LOCKED, user_id=user.id)

        token, expires_in = self._tokens.sign(public)
        record_login_attempt("success")
        logger.info("Login exitoso", extra={"user_id": public.id})
        return LoginResult(user=public, access_token=token, expires_in=expires_in)

    def resolve_token(self, token: str) -> PublicUser:
        """Token válido + usuario existente y activo; si no, TOKEN_INVALID."""
        payload = self._tokens.verify(token)
        user = self._users.get_user(payload.user_id)
        if user is None or not user.is_active:
            raise AuthenticationError(
                AuthFailureReason.TOKEN_INVALID, "Usuario no válido o inactivo"
            )
        return user

    def change_password(
        self, user_id: int, current_password: str, new_password: str
    ) -> None:
        """Verifica el password actual y aplica la política al nuevo."""
        if not self._users.verify_password(user_id, current_password):
            logger.warning("Cambio de contraseña rechazado", extra={"user_id": user_id})
            raise AuthenticationError(
                AuthFailureReason.INVALID_CREDENTIALS, "Contraseña actual incorrecta"
            )
        if not self._users.change_password(user_id, new_password):
            raise AuthenticationError(AuthFailureReason.TOKEN_INVALID)

    def has_permission(self, user_id: int, permission: Permission | str) -> bool:
        return self._users.has_permission(user_id, Permission(permission).value)


# ---------------------------------------------------------------------------
# Dependencias FastAPI
# ---------------------------------------------------------------------------


def auth_service_dependency() -> AuthService:
    """Provider de AuthService (sobrescribible vía app.dependency_overrides)."""
    from ..container import get_auth_service

    return get_auth_service()


def extract_bearer_token(authorization: str | None) -> str | None:
    """Extrae token desde `Authorization: Bearer <token>`."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


async def current_user(
    request: Request,
    authorization: str | None = Header(None, alias="Authorization"),
    auth: AuthService = Depends(auth_service_dependency),
) -> PublicUser:
    token = extract_bearer_token(authorization)
    if not token:
        raise AuthenticationError(AuthFailureReason.TOKEN_MISSING)

    user = auth.resolve_token(token)
    set_user_context(user.id)
    request.state.user = user
    return user


def require_user() -> Callable:
    """Dependency FastAPI: requiere usuario autenticado por JWT."""
    return current_user


def require_permission(permission: Permission | str) -> Callable:
    """Dependency FastAPI: requiere que el rol del usuario tenga el permiso."""
    required = Permission(permission)

    async def dependency(
        user: PublicUser = Depends(current_user),
        auth: AuthService = Depends(auth_service_dependency),
    ) -> PublicUser:
        if not auth.has_permission(user.id, required):
            logger.warning(
                "Permiso denegado",
                extra={"user_id": user.id, "permission": required.value},
            )
            raise forbidden(f"Permiso requerido: {required.value}")
        return user

    return dependency

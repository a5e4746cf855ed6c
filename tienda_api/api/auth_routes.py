"""
===============================================================================
TARJETA CRC — tienda_api/api/auth_routes.py (Autenticación JWT)
===============================================================================

Responsabilidades:
  - Login por username o email con bloqueo por intentos fallidos.
  - Verificación de token y perfil del usuario actual.
  - Cambio de contraseña (verifica la actual y aplica la política).

Colaboradores:
  - identity.auth_users: AuthService, current_user, auth_service_dependency
  - api.user_routes.to_user_response (proyección pública)

Notas:
  - Login es `def` (sync): la verificación Argon2 bloquea y corre en threadpool.
  - Los rechazos (credenciales, bloqueo, inactivo) llegan como AuthenticationError
    y se mapean a 401 en exception_handlers.
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..identity.auth_users import AuthService, auth_service_dependency, require_user
from ..identity.users import PublicUser
from .schemas.users import ChangePasswordReq, LoginReq, LoginRes, UserRes, VerifyRes
from .user_routes import to_user_response

router = APIRouter(prefix="/auth", tags=["auth"], responses=OPENAPI_ERROR_RESPONSES)


@router.post("/login", response_model=LoginRes)
def login(
    req: LoginReq,
    auth: AuthService = Depends(auth_service_dependency),
):
    result = auth.authenticate(req.username, req.password)
    return LoginRes(
        access_token=result.access_token,
        token_type=result.token_type,
        expires_in=result.expires_in,
        user=to_user_response(result.user),
    )


@router.get("/verify", response_model=VerifyRes)
def verify(user: PublicUser = Depends(require_user())):
    return VerifyRes(user=to_user_response(user), token_valid=True)


@router.get("/me", response_model=UserRes)
def me(user: PublicUser = Depends(require_user())):
    return to_user_response(user)


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    req: ChangePasswordReq,
    user: PublicUser = Depends(require_user()),
    auth: AuthService = Depends(auth_service_dependency),
):
    auth.change_password(user.id, req.current_password, req.new_password)

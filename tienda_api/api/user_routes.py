"""
===============================================================================
TARJETA CRC — tienda_api/api/user_routes.py (Directorio de Usuarios)
===============================================================================

Responsabilidades:
  - Exponer CRUD de usuarios sobre InMemoryUserRepository.
  - Exponer desbloqueo explícito (Locked -> Normal), roles y estadísticas.
  - Exigir permisos RBAC (users.*) en cada endpoint.

Colaboradores:
  - container.get_user_repository
  - identity.auth_users.require_permission
  - schemas.users (DTOs)

Notas:
  - DELETE es soft delete (desactivación); el registro se conserva.
  - El listado de usuarios no se pagina.
===============================================================================
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query, status

from ..container import get_user_repository
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..crosscutting.exceptions import NotFoundError, ValidationError
from ..domain.query import UserQuery
from ..identity.auth_users import require_permission
from ..identity.rbac import Permission, Role
from ..identity.users import PublicUser, UserStatistics
from ..infrastructure.repositories.in_memory.user import InMemoryUserRepository
from .schemas.users import (
    PreferencesRes,
    RoleRes,
    UserCreateReq,
    UserListRes,
    UserRes,
    UserStatisticsRes,
    UserUpdateReq,
)

router = APIRouter(
    prefix="/api/users", tags=["users"], responses=OPENAPI_ERROR_RESPONSES
)

_RESOURCE = "Usuario"


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def to_user_response(user: PublicUser) -> UserRes:
    return UserRes(
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
        preferences=PreferencesRes(**asdict(user.preferences)),
    )


def _to_role_response(role: Role) -> RoleRes:
    return RoleRes(
        name=role.name.value,
        display_name=role.display_name,
        permissions=sorted(p.value for p in role.permissions),
    )


def _to_statistics_response(stats: UserStatistics) -> UserStatisticsRes:
    return UserStatisticsRes(
        total_users=stats.total_users,
        active_users=stats.active_users,
        locked_users=stats.locked_users,
        users_by_role=stats.users_by_role,
        recent_logins=stats.recent_logins,
    )


def _list_response(users: list[PublicUser]) -> UserListRes:
    return UserListRes(users=[to_user_response(u) for u in users], count=len(users))


# -----------------------------------------------------------------------------
# Lecturas
# -----------------------------------------------------------------------------
# R: Rutas fijas antes de /{user_id} para que no las capture el path param.


@router.get(
    "/statistics",
    response_model=UserStatisticsRes,
    dependencies=[Depends(require_permission(Permission.REPORTS_READ))],
)
def user_statistics(
    users: InMemoryUserRepository = Depends(get_user_repository),
):
    return _to_statistics_response(users.statistics())


@router.get(
    "/roles",
    response_model=list[RoleRes],
    dependencies=[Depends(require_permission(Permission.USERS_READ))],
)
def list_roles(users: InMemoryUserRepository = Depends(get_user_repository)):
    return [_to_role_response(r) for r in users.roles()]


@router.get(
    "/search",
    response_model=UserListRes,
    dependencies=[Depends(require_permission(Permission.USERS_READ))],
)
def search_users(
    q: str = Query(..., min_length=1),
    users: InMemoryUserRepository = Depends(get_user_repository),
):
    return _list_response(users.search_users(q))


@router.get(
    "",
    response_model=UserListRes,
    dependencies=[Depends(require_permission(Permission.USERS_READ))],
)
def list_users(
    role: str | None = None,
    is_active: bool | None = None,
    is_locked: bool | None = None,
    search: str | None = None,
    sort_by: str | None = None,
    users: InMemoryUserRepository = Depends(get_user_repository),
):
    query = UserQuery(
        role=role,
        is_active=is_active,
        is_locked=is_locked,
        search=search,
        sort_by=sort_by,
    )
    return _list_response(users.list_users(query))


@router.get(
    "/{user_id}",
    response_model=UserRes,
    dependencies=[Depends(require_permission(Permission.USERS_READ))],
)
def get_user(
    user_id: int,
    users: InMemoryUserRepository = Depends(get_user_repository),
):
    user = users.get_user(user_id)
    if user is None:
        raise NotFoundError(_RESOURCE, user_id)
    return to_user_response(user)


# -----------------------------------------------------------------------------
# Mutaciones
# -----------------------------------------------------------------------------


@router.post(
    "",
    response_model=UserRes,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permission.USERS_CREATE))],
)
def create_user(
    req: UserCreateReq,
    users: InMemoryUserRepository = Depends(get_user_repository),
):
    return to_user_response(users.create_user(req.model_dump(exclude_none=True)))


@router.put(
    "/{user_id}",
    response_model=UserRes,
    dependencies=[Depends(require_permission(Permission.USERS_UPDATE))],
)
def update_user(
    user_id: int,
    req: UserUpdateReq,
    users: InMemoryUserRepository = Depends(get_user_repository),
):
    changes = req.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("Datos de actualización inválidos", ["Sin cambios"])
    user = users.update_user(user_id, changes)
    if user is None:
        raise NotFoundError(_RESOURCE, user_id)
    return to_user_response(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(Permission.USERS_DELETE))],
)
def deactivate_user(
    user_id: int,
    users: InMemoryUserRepository = Depends(get_user_repository),
):
    if not users.deactivate_user(user_id):
        raise NotFoundError(_RESOURCE, user_id)


@router.post(
    "/{user_id}/unlock",
    response_model=UserRes,
    dependencies=[Depends(require_permission(Permission.USERS_UPDATE))],
)
def unlock_user(
    user_id: int,
    users: InMemoryUserRepository = Depends(get_user_repository),
):
    user = users.unlock_user(user_id)
    if user is None:
        raise NotFoundError(_RESOURCE, user_id)
    return to_user_response(user)

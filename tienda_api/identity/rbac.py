"""
===============================================================================
TARJETA CRC — identity/rbac.py
===============================================================================

Módulo:
    RBAC (Role-Based Access Control) de usuarios

Responsabilidades:
    - Definir el catálogo de permisos (Permission).
    - Definir la tabla de roles (Role) con sus permisos.
    - Resolver "el rol X tiene el permiso Y".

Colaboradores:
    - infrastructure/repositories/in_memory/user.py: has_permission().
    - identity/auth_users.py: require_permission() para rutas.
    - api/user_routes.py: expone la tabla de roles.

Notas de diseño:
    - El rol guest existe pero no tiene permisos.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .users import UserRole


class Permission(str, Enum):
    """Permisos disponibles en el sistema."""

    # Usuarios
    USERS_READ = "users.read"
    USERS_CREATE = "users.create"
    USERS_UPDATE = "users.update"
    USERS_DELETE = "users.delete"

    # Productos
    PRODUCTS_READ = "products.read"
    PRODUCTS_CREATE = "products.create"
    PRODUCTS_UPDATE = "products.update"
    PRODUCTS_DELETE = "products.delete"

    # Pedidos
    ORDERS_READ = "orders.read"
    ORDERS_CREATE = "orders.create"
    ORDERS_UPDATE = "orders.update"
    ORDERS_DELETE = "orders.delete"

    # Otros
    REPORTS_READ = "reports.read"
    SYSTEM_ADMIN = "system.admin"
    PROFILE_UPDATE = "profile.update"


@dataclass(frozen=True, slots=True)
class Role:
    """Rol con nombre visible y conjunto de permisos."""

    name: UserRole
    display_name: str
    permissions: frozenset[Permission]

    def has_permission(self, permission: Permission | str) -> bool:
        try:
            return Permission(permission) in self.permissions
        except ValueError:
            return False


ROLES: dict[UserRole, Role] = {
    UserRole.ADMIN: Role(
        name=UserRole.ADMIN,
        display_name="Administrador",
        permissions=frozenset(Permission) - {Permission.PROFILE_UPDATE},
    ),
    UserRole.MANAGER: Role(
        name=UserRole.MANAGER,
        display_name="Gerente",
        permissions=frozenset(
            {
                Permission.USERS_READ,
                Permission.USERS_CREATE,
                Permission.USERS_UPDATE,
                Permission.PRODUCTS_READ,
                Permission.PRODUCTS_CREATE,
                Permission.PRODUCTS_UPDATE,
                Permission.PRODUCTS_DELETE,
                Permission.ORDERS_READ,
                Permission.ORDERS_UPDATE,
                Permission.REPORTS_READ,
            }
        ),
    ),
    UserRole.SELLER: Role(
        name=UserRole.SELLER,
        display_name="Vendedor",
        permissions=frozenset(
            {
                Permission.PRODUCTS_READ,
                Permission.PRODUCTS_CREATE,
                Permission.PRODUCTS_UPDATE,
                Permission.ORDERS_READ,
                Permission.ORDERS_CREATE,
                Permission.ORDERS_UPDATE,
            }
        ),
    ),
    UserRole.USER: Role(
        name=UserRole.USER,
        display_name="Cliente",
        permissions=frozenset(
            {
                Permission.PRODUCTS_READ,
                Permission.ORDERS_READ,
                Permission.ORDERS_CREATE,
                Permission.PROFILE_UPDATE,
            }
        ),
    ),
    UserRole.GUEST: Role(
        name=UserRole.GUEST,
        display_name="Invitado",
        permissions=frozenset(),
    ),
}


def get_role(role: UserRole | str) -> Role | None:
    try:
        return ROLES.get(UserRole(role))
    except ValueError:
        return None


def role_has_permission(role: UserRole | str, permission: Permission | str) -> bool:
    found = get_role(role)
    return found.has_permission(permission) if found else False

"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Build the FastAPI application (create_app) with metadata and lifespan
  - Configure middleware (body limit, security headers, request context, CORS)
  - Mount routers: /auth, /api/products, /api/users, /api/store/products
  - Expose health check and metrics endpoints

Collaborators:
  - crosscutting.middleware: RequestContextMiddleware, BodyLimitMiddleware
  - crosscutting.security: SecurityHeadersMiddleware
  - infrastructure.db.pool: init_pool / close_pool (only with DATABASE_URL)
  - api.exception_handlers: StoreError -> RFC7807

Notes:
  - Middleware order: the last one added runs first (RequestContext wraps the rest)
  - The in-memory catalog and user directory need no startup work
  - /healthz follows Kubernetes health check convention
  - /metrics exposes Prometheus metrics (admin-only when METRICS_REQUIRE_AUTH=true)
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from ..container import get_document_product_repository
from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import forbidden
from ..crosscutting.exceptions import DatabaseError
from ..crosscutting.logger import logger
from ..crosscutting.metrics import get_metrics_response
from ..crosscutting.middleware import BodyLimitMiddleware, RequestContextMiddleware
from ..crosscutting.security import SecurityHeadersMiddleware
from ..identity.auth_users import AuthService, auth_service_dependency, current_user
from ..identity.rbac import Permission
from ..infrastructure.db.errors import DatabasePoolError
from ..infrastructure.db.pool import close_pool, init_pool
from .auth_routes import router as auth_router
from .exception_handlers import register_exception_handlers
from .product_routes import router as product_router
from .store_routes import router as store_router
from .user_routes import router as user_router

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Opens the pool only if a database is configured."""
    settings = get_settings()

    if settings.has_document_store():
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    logger.info(
        "Tienda API iniciando",
        extra={
            "app_env": settings.app_env,
            "document_store": settings.has_document_store(),
            "max_login_attempts": settings.max_login_attempts,
            "db_pool_min": settings.db_pool_min_size,
            "db_pool_max": settings.db_pool_max_size,
        },
    )

    try:
        yield
    finally:
        close_pool()
        logger.info("Tienda API detenida")


async def require_metrics_access(
    request: Request,
    authorization: str | None = Header(None, alias="Authorization"),
    auth: AuthService = Depends(auth_service_dependency),
) -> None:
    """Con METRICS_REQUIRE_AUTH=true, /metrics exige system.admin."""
    if not get_settings().metrics_require_auth:
        return
    user = await current_user(request, authorization, auth)
    if not auth.has_permission(user.id, Permission.SYSTEM_ADMIN):
        raise forbidden(f"Permiso requerido: {Permission.SYSTEM_ADMIN.value}")


def healthz(request: Request):
    """
    Returns:
        ok: False only when a configured document store is unreachable
        document_store: "disabled", "connected" or "disconnected"
        request_id: Correlation ID for this request
    """
    store_status = "disabled"
    repo = get_document_product_repository()
    if repo is not None:
        store_status = "disconnected"
        try:
            if repo.ping():
                store_status = "connected"
        except (DatabaseError, DatabasePoolError) as exc:
            logger.warning(
                "Health check: document store no disponible",
                extra={"error": str(exc)},
            )

    return {
        "ok": store_status != "disconnected",
        "document_store": store_status,
        "version": APP_VERSION,
        "request_id": getattr(request.state, "request_id", None),
    }


def metrics(_: None = Depends(require_metrics_access)):
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="Tienda API",
        version=APP_VERSION,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "auth", "description": "Autenticación JWT"},
            {"name": "products", "description": "Catálogo in-memory"},
            {"name": "users", "description": "Directorio de usuarios (RBAC)"},
            {"name": "store", "description": "Catálogo en document store"},
        ],
    )

    app.add_middleware(BodyLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-Id"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_api_route("/healthz", healthz, methods=["GET"], tags=["health"])
    app.add_api_route("/metrics", metrics, methods=["GET"], tags=["health"])

    app.include_router(auth_router)
    app.include_router(product_router)
    app.include_router(user_router)
    app.include_router(store_router)

    register_exception_handlers(app)
    return app


app = create_app()

"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the reference store behavior

Collaborators:
  - api/main.py: reads settings for CORS, body limits and pool startup
  - container.py: reads lockout threshold and password policy
  - identity/auth_users.py: reads JWT secret, TTL and issuer

Constraints:
  - Lives in API/infrastructure layer, NOT in domain
  - No business logic, only configuration

Notes:
  - Singleton via lru_cache
  - database_url is optional: without it the document-store backend is disabled
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PLACEHOLDER_SECRETS = frozenset(
    {"", "dev-secret", "changeme", "change-me", "secret", "password"}
)
_MIN_PRODUCTION_SECRET = 32


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (development/production/test)
        log_level: Logging level (default: INFO)
        log_json: Emit JSON logs (default: True)
        allowed_origins: Comma-separated CORS origins
        cors_allow_credentials: Allow cookies cross-origin (default: False)
        max_body_bytes: Max request body size (default: 10MB)
        jwt_secret: Secret for signing JWT access tokens
        jwt_access_ttl_minutes: Access token TTL in minutes (default: 24h)
        jwt_issuer: `iss` claim of issued tokens
        database_url: PostgreSQL connection string for the document store (optional)
        db_pool_min_size / db_pool_max_size: connection pool bounds
        db_statement_timeout_ms: statement_timeout applied per connection
        max_login_attempts: failed logins before an account is locked (default: 5)
        password_min_length: minimum password length (default: 6)
        password_require_*: optional strength requirements (default: off)
        metrics_require_auth: Require admin token for /metrics (default: False)
    """

    # Environment
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # CORS configuration
    allowed_origins: str = (
        "http://localhost:3000,http://localhost:3001,"
        "http://localhost:8080,http://localhost:4200"
    )
    cors_allow_credentials: bool = False

    # Security - Hardening
    max_body_bytes: int = 10 * 1024 * 1024  # 10MB
    metrics_require_auth: bool = False

    # Security - JWT Auth
    jwt_secret: str = "dev-secret"
    jwt_access_ttl_minutes: int = 24 * 60
    jwt_issuer: str = "tienda-api"

    # Document store (Postgres JSONB)
    database_url: str = ""
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    db_statement_timeout_ms: int = 30000  # 30 seconds

    # Account lockout
    max_login_attempts: int = 5

    # Password policy
    password_min_length: int = 6
    password_require_uppercase: bool = False
    password_require_lowercase: bool = False
    password_require_digit: bool = False
    password_require_special: bool = False

    @field_validator("max_login_attempts")
    @classmethod
    def max_login_attempts_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_login_attempts must be greater than 0")
        return v

    @field_validator("password_min_length")
    @classmethod
    def password_min_length_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("password_min_length must be greater than 0")
        return v

    @field_validator("jwt_access_ttl_minutes")
    @classmethod
    def jwt_ttl_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("jwt_access_ttl_minutes must be greater than 0")
        return v

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    def has_document_store(self) -> bool:
        return bool(self.database_url.strip())

    @model_validator(mode="after")
    def validate_pool_bounds(self):
        if self.db_pool_min_size > self.db_pool_max_size:
            raise ValueError(
                f"db_pool_min_size ({self.db_pool_min_size}) must be <= "
                f"db_pool_max_size ({self.db_pool_max_size})"
            )
        return self

    @model_validator(mode="after")
    def reject_weak_production_secret(self):
        # R: Solo producción; en dev/test vale el secreto por defecto.
        if self.is_production():
            secret = (self.jwt_secret or "").strip()
            if secret.lower() in _PLACEHOLDER_SECRETS:
                raise ValueError("JWT_SECRET is empty or a placeholder; set a real one")
            if len(secret) < _MIN_PRODUCTION_SECRET:
                raise ValueError(
                    f"JWT_SECRET needs {_MIN_PRODUCTION_SECRET}+ characters in production"
                )
        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()

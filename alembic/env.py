"""
============================================================
TARJETA CRC — alembic/env.py (Entorno de migraciones)
============================================================
Responsabilidades:
  - Correr las migraciones SQL del document store, online u offline.
  - Tomar la URL de DATABASE_URL (Settings de la app) o de alembic.ini.

Colaboradores:
  - tienda_api.crosscutting.config.get_settings
  - SQLAlchemy (engine con driver psycopg 3)

Política:
  - Sin metadata ORM: cada revisión es SQL explícito (no hay autogenerate).
============================================================
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from tienda_api.crosscutting.config import get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

_DRIVER_PREFIXES = ("postgresql://", "postgres://")


def database_url() -> str:
    raw = get_settings().database_url.strip() or config.get_main_option("sqlalchemy.url")
    for prefix in _DRIVER_PREFIXES:
        if raw.startswith(prefix):
            return "postgresql+psycopg://" + raw[len(prefix):]
    return raw


if context.is_offline_mode():
    context.configure(
        url=database_url(),
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()
else:
    engine = create_engine(database_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=None)
        with context.begin_transaction():
            context.run_migrations()

"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: 001_documents (Alembic Migration)

Responsibilities:
  - Crear la tabla `documents` del document store (JSONB por colección).
  - Índice (collection, created_at, id) para el orden por defecto.
  - Índice GIN sobre data para filtros de igualdad (data @> ...).

Collaborators:
  - PostgreSQL 16+ (JSONB, GIN, starts_with)
  - infrastructure.repositories.postgres.document_store
============================================================
"""

from typing import Sequence, Union

from alembic import op

# ============================================================
# Alembic identifiers
# ============================================================
revision: str = "001_documents"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_TABLE = "documents"


def upgrade() -> None:
    op.execute(
        f"""
        CREATE TABLE {_TABLE} (
            id          VARCHAR(64) PRIMARY KEY,
            collection  VARCHAR(100) NOT NULL,
            data        JSONB NOT NULL DEFAULT '{{}}'::jsonb,
            created_at  TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT now()
        )
        """
    )
    op.execute(
        f"CREATE INDEX ix_{_TABLE}_collection_created "
        f"ON {_TABLE} (collection, created_at, id)"
    )
    op.execute(f"CREATE INDEX ix_{_TABLE}_data_gin ON {_TABLE} USING GIN (data)")


def downgrade() -> None:
    op.execute(f"DROP INDEX IF EXISTS ix_{_TABLE}_data_gin")
    op.execute(f"DROP INDEX IF EXISTS ix_{_TABLE}_collection_created")
    op.execute(f"DROP TABLE IF EXISTS {_TABLE}")

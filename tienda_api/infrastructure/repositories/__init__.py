"""
============================================================
TARJETA CRC
============================================================
Class: tienda_api.infrastructure.repositories (Package exports)

Responsibilities:
- Exponer implementaciones concretas de repositorios (InMemory y document store)
  en un único punto de importación.

Collaborators:
- Repositorios InMemory (catálogo y usuarios semilla, sin persistencia)
- Repositorios Postgres (documentos JSONB)
============================================================
"""

# ---------------------------
# In-memory implementations
# No persisten datos tras reiniciar la app.
# ---------------------------
from .in_memory.product import InMemoryProductRepository
from .in_memory.user import InMemoryUserRepository

# ---------------------------
# Postgres implementations
# ---------------------------
from .postgres.document_store import PostgresDocumentStore, StoredDocument
from .postgres.product import DocumentProductRepository, StoredProduct

__all__ = [
    "InMemoryProductRepository",
    "InMemoryUserRepository",
    "PostgresDocumentStore",
    "StoredDocument",
    "DocumentProductRepository",
    "StoredProduct",
]

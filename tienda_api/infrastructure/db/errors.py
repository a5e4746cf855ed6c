"""Errores del ciclo de vida del pool (infrastructure/db/pool.py)."""


class DatabasePoolError(Exception):
    pass


class PoolAlreadyInitializedError(DatabasePoolError):
    """init_pool() llamado con un pool ya abierto."""


class PoolNotInitializedError(DatabasePoolError):
    """get_pool() sin init_pool(): el document store está deshabilitado."""

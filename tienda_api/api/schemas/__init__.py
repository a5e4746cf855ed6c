"""
===============================================================================
TARJETA CRC — api/schemas/__init__.py
===============================================================================

Módulo:
    Paquete de Schemas HTTP (DTOs Pydantic)

Responsabilidades:
    - Agrupar contratos HTTP por contexto (auth / products / users).
    - Mantener separados DTOs (schemas) de controladores (routers).

Reglas:
    - Schemas NO importan infraestructura.
    - Solo tipos y validación de input/output; las reglas de negocio
      las aplican los repositorios.
===============================================================================
"""

__all__ = []

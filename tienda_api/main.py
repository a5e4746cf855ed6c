"""
Name: ASGI Entrypoint (tienda_api.main)

Responsibilities:
  - Re-export the FastAPI app for ASGI servers and tooling
  - Keep the import path used by uvicorn and tests stable

Notes:
  - No configuration or IO lives here
  - Run with: uvicorn tienda_api.main:app
"""

from tienda_api.api.main import app

__all__ = ["app"]

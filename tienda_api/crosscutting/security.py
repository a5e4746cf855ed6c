"""
===============================================================================
TARJETA CRC — crosscutting/security.py (Headers de hardening)
===============================================================================

Responsabilidades:
  - Sumar headers defensivos a cada respuesta HTTP de la tienda.
  - En desarrollo permitir scripts/estilos inline (Swagger en /docs).
  - HSTS únicamente en producción cuando el request llegó por HTTPS.

Colaboradores:
  - crosscutting.config.get_settings
===============================================================================
"""

from __future__ import annotations

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .config import get_settings

_HSTS = "max-age=31536000; includeSubDomains"


def _content_security_policy(allow_inline: bool) -> str:
    src = "'self' 'unsafe-inline'" if allow_inline else "'self'"
    directives = {
        "default-src": "'self'",
        "script-src": src,
        "style-src": src,
        "img-src": "'self' data: https:",
        "connect-src": "'self'",
    }
    return "; ".join(f"{name} {value}" for name, value in directives.items())


class SecurityHeadersMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app
        self._production = get_settings().is_production()
        self._fixed_headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
            "Permissions-Policy": "camera=(), geolocation=(), microphone=(), payment=()",
            "Content-Security-Policy": _content_security_policy(
                allow_inline=not self._production
            ),
        }

    def _over_https(self, scope: Scope) -> bool:
        forwarded = Headers(scope=scope).get("x-forwarded-proto")
        return (forwarded or scope.get("scheme", "")).lower() == "https"

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        add_hsts = self._production and self._over_https(scope)

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.update(self._fixed_headers)
                if add_hsts:
                    headers["Strict-Transport-Security"] = _HSTS
            await send(message)

        await self.app(scope, receive, send_with_headers)

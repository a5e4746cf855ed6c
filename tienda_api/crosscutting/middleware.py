"""
===============================================================================
TARJETA CRC — crosscutting/middleware.py (Middlewares ASGI)
===============================================================================

Responsabilidades:
  - RequestContextMiddleware: X-Request-Id de entrada/salida, ContextVars
    para logs, una línea de log y una muestra de métricas por request.
  - BodyLimitMiddleware: 413 problem+json cuando el body supera el máximo,
    ya sea por Content-Length o contando bytes mientras llegan.

Colaboradores:
  - tienda_api/context.py
  - crosscutting/metrics.py (record_request_metrics)
  - crosscutting/error_responses.py (problem_body)
===============================================================================
"""

from __future__ import annotations

import json
import time
import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..context import clear_context, set_request_context
from .config import get_settings
from .error_responses import PROBLEM_JSON, ErrorCode, problem_body
from .logger import logger
from .metrics import record_request_metrics

_REQUEST_ID_MAX = 128
_UNLOGGED = frozenset({"/healthz", "/metrics"})


def resolve_request_id(incoming: str | None) -> str:
    """Usa el id del cliente si es razonable; si no, genera un uuid4."""
    candidate = (incoming or "").strip()
    if 0 < len(candidate) <= _REQUEST_ID_MAX:
        return candidate
    return str(uuid.uuid4())


def _elapsed_ms(since: float) -> float:
    return round((time.perf_counter() - since) * 1000, 2)


class RequestContextMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method, path = scope["method"], scope["path"]
        request_id = resolve_request_id(Headers(scope=scope).get("x-request-id"))
        # R: request.state.request_id para handlers de error y /healthz.
        scope.setdefault("state", {})["request_id"] = request_id
        set_request_context(request_id=request_id, method=method, path=path)

        started_at = time.perf_counter()
        status = 500

        async def send_tagged(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
                MutableHeaders(scope=message)["X-Request-Id"] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_tagged)
        except Exception:
            status = 500
            logger.exception(
                "Request abortado por excepción",
                extra={"status_code": status, "latency_ms": _elapsed_ms(started_at)},
            )
            raise
        finally:
            record_request_metrics(
                endpoint=path,
                method=method,
                status_code=status,
                latency_seconds=time.perf_counter() - started_at,
            )
            if path not in _UNLOGGED:
                logger.info(
                    f"{method} {path} -> {status}",
                    extra={"status_code": status, "latency_ms": _elapsed_ms(started_at)},
                )
            clear_context()


class _LimitExceeded(Exception):
    def __init__(self, received: int):
        super().__init__(received)
        self.received = received


class BodyLimitMiddleware:
    """Rechaza con 413 los requests cuyo body excede `max_bytes`."""

    def __init__(self, app: ASGIApp, max_bytes: int | None = None):
        self.app = app
        self.max_bytes = (
            get_settings().max_body_bytes if max_bytes is None else max_bytes
        )

    def _declared_too_large(self, headers: Headers) -> bool:
        length = headers.get("content-length", "")
        return length.isdigit() and int(length) > self.max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        request_id = resolve_request_id(headers.get("x-request-id"))

        if self._declared_too_large(headers):
            logger.warning(
                "Body rechazado por Content-Length",
                extra={
                    "content_length": headers["content-length"],
                    "max_bytes": self.max_bytes,
                },
            )
            await self._reject(send, scope["path"], request_id)
            return

        received = 0
        response_started = False

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body") or b"")
                if received > self.max_bytes:
                    raise _LimitExceeded(received)
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, counting_receive, tracking_send)
        except _LimitExceeded as exc:
            if response_started:
                raise
            logger.warning(
                "Body rechazado al superar el máximo durante la lectura",
                extra={"received_bytes": exc.received, "max_bytes": self.max_bytes},
            )
            await self._reject(send, scope["path"], request_id)

    async def _reject(self, send: Send, path: str, request_id: str) -> None:
        body = problem_body(
            413,
            ErrorCode.PAYLOAD_TOO_LARGE,
            f"El body supera el máximo de {self.max_bytes} bytes",
            instance=path,
            errors=[{"request_id": request_id}],
        )
        payload = json.dumps(body, ensure_ascii=False).encode("utf-8")
        await send(
            {
                "type": "http.response.start",
                "status": 413,
                "headers": [
                    (b"content-type", PROBLEM_JSON.encode()),
                    (b"content-length", str(len(payload)).encode()),
                    (b"x-request-id", request_id.encode()),
                ],
            }
        )
        await send({"type": "http.response.body", "body": payload})

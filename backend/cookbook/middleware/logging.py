"""
Family Cookbook Backend — Access Log Middleware
=================================================

One line per `/api/*` request on the `cookbook.access` logger:

    POST /api/upload-document 413 3.2ms [a1b2c3d4] from 127.0.0.1

Level by status: 5xx ERROR, 4xx WARNING, anything else INFO. The same values
are attached as `extra` fields for structured handlers. Bodies and cookies
are never logged. A request that dies before a response starts is logged
as 500.
"""

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from cookbook.middleware.request_id import request_id_var

logger = logging.getLogger("cookbook.access")

API_PREFIX = "/api/"


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not scope["path"].startswith(API_PREFIX):
            await self.app(scope, receive, send)
            return

        status = 500
        started = time.perf_counter()

        async def send_capturing_status(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_capturing_status)
        finally:
            self._log(scope, status, (time.perf_counter() - started) * 1000)

    @staticmethod
    def _log(scope: Scope, status: int, elapsed_ms: float) -> None:
        client = scope.get("client")
        client_ip = client[0] if client else "unknown"
        rid = request_id_var.get("")
        method, path = scope["method"], scope["path"]
        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            method, path, status, elapsed_ms, rid, client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(elapsed_ms, 2),
                "client_ip": client_ip,
            },
        )

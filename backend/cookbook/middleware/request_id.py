"""
Family Cookbook Backend — Request ID Middleware
=================================================

Every request gets a short correlation id:

    incoming X-Request-ID header  ──▶ reused as-is
    absent                        ──▶ first 8 hex chars of a UUID4

The id goes into `request_id_var` (read by the exception handlers and the
access log), into `scope["state"]` so `request.state.request_id` works in
routes, and back out on the response as X-Request-ID. Error bodies carry the
same value, so a reported failure can be matched to its log lines.
"""

import uuid
from contextvars import ContextVar

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware:
    """Plain ASGI middleware; websocket and lifespan scopes pass straight through."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        rid = Headers(scope=scope).get(REQUEST_ID_HEADER) or new_request_id()
        # Left set after the response: ServerErrorMiddleware sits outside this
        # one and its 500 body still reads the id. Each request is its own task.
        request_id_var.set(rid)
        scope.setdefault("state", {})["request_id"] = rid

        async def send_with_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = rid
            await send(message)

        await self.app(scope, receive, send_with_id)

"""
Family Cookbook Backend — Upload Size Limit Middleware
========================================================

What:  Stops oversized upload bodies before they are buffered.
How:   Two checks on POSTs to the upload paths:

    Content-Length over the limit  ──▶ 413 JSON at once, body never read
    otherwise                      ──▶ receive() is wrapped and counts the
                                       body bytes as they stream in; past the
                                       limit it raises HTTPException(413),
                                       which aborts multipart parsing

The second check covers chunked requests (no Content-Length) and clients
that send more than they declared. Either way the route never runs.

The limit applies to the whole request body, which is slightly larger than
the file itself (multipart boundaries, the title field), so it allows a small
fixed allowance on top of max_file_size.
"""

import logging
from typing import Iterable

from starlette.datastructures import Headers
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from cookbook.exceptions import FileTooLargeError
from cookbook.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

# Room for multipart headers, boundaries and small form fields
MULTIPART_OVERHEAD = 64 * 1024


class UploadSizeLimitMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        max_file_size: int,
        paths: Iterable[str] = ("/api/upload-document",),
    ):
        self.app = app
        self.max_file_size = max_file_size
        self.max_body_size = max_file_size + MULTIPART_OVERHEAD
        self.paths = frozenset(paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] != "http"
            or scope["method"] != "POST"
            or scope["path"] not in self.paths
        ):
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_body_size:
            logger.warning(
                "[%s] Upload rejected: Content-Length %s exceeds %d",
                request_id_var.get(""), declared, self.max_body_size,
            )
            response = self._too_large_response(int(declared))
            await response(scope, receive, send)
            return

        await self.app(scope, self._counting_receive(receive), send)

    def _too_large_response(self, size: int) -> JSONResponse:
        exc = FileTooLargeError(max_size=self.max_file_size, actual_size=size)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error_code,
                "message": exc.message,
                "details": exc.context,
                "request_id": request_id_var.get(""),
            },
        )

    def _counting_receive(self, receive: Receive) -> Receive:
        received = 0

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    logger.warning(
                        "[%s] Upload rejected: body passed %d bytes while streaming",
                        request_id_var.get(""), self.max_body_size,
                    )
                    raise HTTPException(
                        status_code=413,
                        detail=FileTooLargeError(max_size=self.max_file_size).message,
                    )
            return message

        return counting_receive

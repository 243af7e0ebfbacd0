"""
Request body size limit.

Requests that declare a ``Content-Length`` above the limit are rejected up
front. Requests without one (chunked uploads) are buffered up to the limit
and rejected as soon as they cross it; otherwise the buffered body is
replayed to the application unchanged.
"""
import logging
from typing import List, Optional

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core import config

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """Answer 413 for request bodies larger than ``max_bytes``."""

    def __init__(self, app: ASGIApp, *, max_bytes: Optional[int] = None) -> None:
        self.app = app
        self.max_bytes = max_bytes

    @property
    def limit(self) -> int:
        return self.max_bytes if self.max_bytes is not None else config.MAX_BODY_BYTES

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length is not None:
            if length.isdigit() and int(length) > self.limit:
                await self._reject(scope, receive, send, int(length))
                return
            await self.app(scope, receive, send)
            return

        buffered: List[Message] = []
        received = 0
        while True:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.limit:
                await self._reject(scope, receive, send, received)
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: int) -> None:
        logger.warning(f"Request body too large: {scope.get('method')} {scope.get('path')} ({size}+ bytes)")
        response = JSONResponse(
            status_code=413,
            content={"detail": "Request body too large.", "code": "payload_too_large"},
        )
        await response(scope, receive, send)

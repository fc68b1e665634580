from __future__ import annotations

import time
import uuid

import structlog

logger = structlog.get_logger()


class RequestLoggingMiddleware:
    """Tags each request with an id and logs method, path, status and duration."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        request_id = uuid.uuid4().hex
        status = {"code": 500}
        start = time.perf_counter()

        async def send_wrapper(message):
            if message.get("type") == "http.response.start":
                status["code"] = message.get("status", 500)
                headers = message.setdefault("headers", [])
                headers.append((b"x-request-id", request_id.encode()))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            logger.info(
                "request_completed",
                method=scope.get("method", ""),
                path=scope.get("path", ""),
                status=status["code"],
                duration_ms=int((time.perf_counter() - start) * 1000),
                request_id=request_id,
            )

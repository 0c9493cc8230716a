# -*- coding: utf-8 -*-
"""
Request tracking: one ID per HTTP request, echoed back and attached to logs.

Webhook calls and refreshes are logged at INFO. Reads (panel, long-poll
snapshots, health) are frequent and only logged at DEBUG.
"""
import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .config import settings

logger = logging.getLogger(__name__)

# Request ID of the HTTP call being served (accessible across async calls)
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    return request_id_ctx.get()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's request ID (the bridge sends one) or mint a new one."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(settings.REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_ctx.set(request_id)
        started = time.perf_counter()
        status = 500

        try:
            response = await call_next(request)
            status = response.status_code
            response.headers[settings.REQUEST_ID_HEADER] = request_id
            return response
        finally:
            level = logging.DEBUG if request.method in ("GET", "HEAD") else logging.INFO
            logger.log(
                level,
                f"{request.method} {request.url.path} -> {status}",
                extra={
                    "status_code": status,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                },
            )
            request_id_ctx.reset(token)

"""
Request logging middleware.

Binds a correlation id to structlog's contextvars so every log line emitted
while serving a request carries it, and echoes the id back to the caller.
"""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from structlog.contextvars import bind_contextvars, clear_contextvars

logger = structlog.get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class LoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        clear_contextvars()

        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        bind_contextvars(
            correlation_id=correlation_id,
            request_method=request.method,
            request_path=request.url.path,
        )

        start_time = time.time()
        logger.info("request_started", query_params=dict(request.query_params))

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.exception("request_failed", duration_ms=duration_ms)
            raise

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

"""
Request logging middleware with correlation IDs for request tracing.

The request and visualizer session IDs are bound into structlog's context
variables for the lifetime of each request; the processors configured in
core.logging merge them into every record.
"""
import logging
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from structlog.contextvars import bind_contextvars, clear_contextvars, get_contextvars

SESSION_HEADER = "X-Session-ID"
REQUEST_ID_HEADER = "X-Request-ID"

logger = structlog.stdlib.get_logger(__name__)


def get_request_id() -> str:
    """Get the current request ID from context."""
    return get_contextvars().get("request_id", "")


def get_session_id() -> str:
    """Get the current session ID from context."""
    return get_contextvars().get("session_id", "")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that:
    1. Assigns a short request ID to each request
    2. Binds it, and the X-Session-ID header when sent, to the log context
    3. Logs request start/end with timing
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]
        clear_contextvars()
        bind_contextvars(request_id=request_id)

        session_id = request.headers.get(SESSION_HEADER)
        if session_id:
            bind_contextvars(session_id=session_id)

        path = request.url.path
        start_time = time.time()
        logger.info(f"→ {request.method} {path}", method=request.method, path=path, query=str(request.query_params))

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(f"✗ Error: {str(e)[:100]}", duration_ms=round(duration_ms), exc_info=True)
            raise

        duration_ms = (time.time() - start_time) * 1000
        log_level = logging.INFO if response.status_code < 400 else logging.WARNING
        logger.log(log_level, f"← {response.status_code}", status_code=response.status_code, duration_ms=round(duration_ms))

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger whose records carry the bound request/session IDs."""
    return structlog.stdlib.get_logger(name)

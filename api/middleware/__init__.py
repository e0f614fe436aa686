"""
Middleware package for the API.
"""
from middleware.logging_middleware import (
    REQUEST_ID_HEADER,
    SESSION_HEADER,
    RequestLoggingMiddleware,
    get_logger,
    get_request_id,
    get_session_id,
)

__all__ = [
    "REQUEST_ID_HEADER",
    "SESSION_HEADER",
    "RequestLoggingMiddleware",
    "get_logger",
    "get_request_id",
    "get_session_id",
]

"""
Request logging middleware.

Binds a correlation ID and the request context for the duration of each
request, so every log record written by route handlers carries them, and
logs the request's completion with its status code and duration.
"""

import logging
import time
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..observability import (
    clear_correlation_id,
    clear_request_context,
    get_logger,
    log_operation,
    set_correlation_id,
    set_request_context,
)

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs every HTTP request with its correlation ID.

    An incoming ``X-Correlation-ID`` header is reused; otherwise a new ID is
    generated. The ID is echoed back on the response.
    """

    def __init__(self, app, header_name: str = CORRELATION_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = set_correlation_id(request.headers.get(self.header_name))
        set_request_context(
            method=request.method,
            url=request.url.path,
            ip=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            log_operation(
                logger,
                "http.request",
                level=logging.ERROR,
                success=False,
                duration_ms=(time.time() - start_time) * 1000,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        else:
            status_code = response.status_code
            log_operation(
                logger,
                "http.request",
                level=logging.WARNING if status_code >= 400 else logging.INFO,
                success=status_code < 500,
                duration_ms=(time.time() - start_time) * 1000,
                status_code=status_code,
            )
            response.headers[self.header_name] = correlation_id
            return response
        finally:
            clear_correlation_id()
            clear_request_context()

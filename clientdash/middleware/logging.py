"""
Access Logging Middleware

Logs every API request with a correlation id, status and duration.
"""

import time
import uuid
import logging
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

SKIPPED_PATHS = ["/", "/health", "/docs", "/openapi.json"]


class AccessLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log API access.

    Captures:
    - Request details (endpoint, method, client IP)
    - Response status and duration
    - Request tracking (X-Request-ID response header)
    """

    def __init__(self, app: ASGIApp, enabled: bool = True):
        """
        Initialize the middleware.

        Args:
            app: FastAPI application
            enabled: Whether access lines are logged
        """
        super().__init__(app)
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in SKIPPED_PATHS:
            return await call_next(request)

        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start_time) * 1000)

        if self.enabled:
            logger.info(
                f"{request.method} {self._loggable_path(request)} -> {response.status_code} "
                f"({duration_ms}ms) ip={self._get_client_ip(request)} request_id={request_id}"
            )

        response.headers["X-Request-ID"] = request_id
        return response

    def _loggable_path(self, request: Request) -> str:
        path = request.url.path
        # Reset tokens are credentials
        if "/reset-password/" in path:
            return path.split("/reset-password/")[0] + "/reset-password/***"
        return path

    def _get_client_ip(self, request: Request) -> str:
        """
        Extract client IP address from request.

        Checks X-Forwarded-For header first (for proxied requests),
        then falls back to direct client IP.
        """
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"

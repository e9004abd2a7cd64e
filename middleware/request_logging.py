"""
Request logging middleware for FastAPI

Assigns every request an id, makes it available to the structured logger and
logs one line per request with method, path, status and latency.
"""

import logging
import time
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging_config import set_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to tag requests with an id and log their outcome."""

    def __init__(self, app, config: Optional[Dict[str, Any]] = None):
        super().__init__(app)
        self.config = config or {}

        # Endpoints that are not logged (still get a request id)
        self.exclude_paths = self.config.get('exclude_paths', [])

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        set_request_id(request_id)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error("request_failed", extra={
                "method": request.method,
                "path": request.url.path,
                "error": str(e),
                "error_type": type(e).__name__,
            })
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        if not any(request.url.path.startswith(path) for path in self.exclude_paths):
            logger.info("request_completed", extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            })
        return response


def create_request_logging_config() -> Dict[str, Any]:
    """Create default configuration for the request logging middleware."""
    return {
        'exclude_paths': [
            '/health',  # Health check endpoints
            '/docs',  # API documentation
            '/openapi.json',  # OpenAPI schema
        ],
    }

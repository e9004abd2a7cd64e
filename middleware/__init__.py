"""
Middleware package for the courses API.

This package contains middleware components for the FastAPI application,
such as request id tagging and request logging.
"""

from .request_logging import RequestLoggingMiddleware, create_request_logging_config

__all__ = [
    'RequestLoggingMiddleware',
    'create_request_logging_config'
]

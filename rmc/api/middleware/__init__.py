"""API middleware."""

from rmc.api.middleware.error_handler import ErrorHandlerMiddleware
from rmc.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]

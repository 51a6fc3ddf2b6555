"""API middleware."""

from src.api.middleware.error_handler import (
    ErrorHandlerMiddleware,
    build_error_response,
    setup_exception_handlers,
)
from src.api.middleware.logging import LoggingMiddleware

__all__ = [
    "LoggingMiddleware",
    "ErrorHandlerMiddleware",
    "build_error_response",
    "setup_exception_handlers",
]

"""Middleware module for the wagateway API."""

from .api_key import ApiKeyMiddleware
from .error_handler import ErrorHandlerMiddleware, register_exception_handlers
from .request_logging import RequestLoggingMiddleware

__all__ = [
    "ApiKeyMiddleware",
    "ErrorHandlerMiddleware",
    "RequestLoggingMiddleware",
    "register_exception_handlers",
]

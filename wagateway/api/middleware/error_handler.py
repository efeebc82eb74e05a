"""
Global error handling for the wagateway API.

Known errors (the ``WagatewayError`` taxonomy and FastAPI request validation)
are translated by exception handlers registered on the app; anything else is
caught by ErrorHandlerMiddleware and turned into a structured 500.
"""

import time
import traceback
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from wagateway.core.exceptions import GatewayError, ValidationError, WagatewayError
from wagateway.core.logging.logger import get_logger


def _is_development(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return bool(settings and settings.is_development)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Catches all unhandled exceptions and provides structured error responses
    without exposing internal details outside development.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            response = await call_next(request)
            return response

        except HTTPException as http_exc:
            await self._log_http_exception(request, http_exc)
            raise

        except Exception as exc:
            return await self._handle_unexpected_exception(request, exc)

    async def _log_http_exception(self, request: Request, exc: HTTPException) -> None:
        logger = get_logger(__name__)
        logger.warning(
            f"HTTP {exc.status_code} - {request.method} {request.url.path} - "
            f"Detail: {exc.detail}"
        )

    async def _handle_unexpected_exception(
        self, request: Request, exc: Exception
    ) -> JSONResponse:
        logger = get_logger(__name__)
        logger.error(
            f"Unhandled exception in {request.method} {request.url.path}: {exc}",
            exc_info=True,
        )

        error_response: dict[str, Any] = {
            "detail": "Internal server error",
            "type": "internal_error",
            "timestamp": time.time(),
        }

        if _is_development(request):
            error_response["debug"] = {
                "exception_type": type(exc).__name__,
                "exception_message": str(exc),
                "traceback": traceback.format_exc().split("\n"),
            }

        return JSONResponse(status_code=500, content=error_response)


class ValidationErrorHandler:
    """Formats validation failures into user-friendly API responses."""

    @staticmethod
    def format_validation_error(exc: RequestValidationError) -> dict[str, Any]:
        """Format Pydantic validation errors for API responses."""
        errors = []

        for error in exc.errors():
            errors.append(
                {
                    "field": " -> ".join(str(loc) for loc in error["loc"]),
                    "message": error["msg"],
                    "type": error["type"],
                }
            )

        return {
            "detail": "Validation failed",
            "type": "validation_error",
            "errors": errors,
        }

    @staticmethod
    def format_domain_error(exc: ValidationError) -> dict[str, Any]:
        """Same response shape for validation errors raised by wagateway code."""
        return {
            "detail": "Validation failed",
            "type": exc.error_type,
            "errors": [
                {
                    "field": exc.field or "body",
                    "message": exc.message,
                    "type": "value_error",
                }
            ],
        }


def error_response(exc: WagatewayError) -> JSONResponse:
    """JSON response for a wagateway error, using the status the error maps to."""
    if isinstance(exc, GatewayError):
        content = exc.to_response()
    elif isinstance(exc, ValidationError):
        content = ValidationErrorHandler.format_domain_error(exc)
    else:
        content = {"detail": exc.message, "type": exc.error_type}
    return JSONResponse(status_code=exc.status_code, content=content)


async def wagateway_error_handler(request: Request, exc: WagatewayError) -> JSONResponse:
    logger = get_logger(__name__)
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(
            f"{request.method} {request.url.path} rejected "
            f"({exc.status_code} {exc.error_type}): {exc.message}"
        )
    return error_response(exc)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger = get_logger(__name__)
    logger.warning(
        f"Validation failed for {request.method} {request.url.path}: "
        f"{len(exc.errors())} error(s)"
    )
    return JSONResponse(
        status_code=400, content=ValidationErrorHandler.format_validation_error(exc)
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map the exception taxonomy and request validation onto HTTP responses."""
    app.add_exception_handler(WagatewayError, wagateway_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

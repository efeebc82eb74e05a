"""
Request and response logging middleware.

Logs method, path, status and duration of every API call, leaving out
credentials and webhook signatures.
"""

import time
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from wagateway.core.logging.logger import get_logger

SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "x-api-key",
        "cookie",
        "set-cookie",
        "x-hub-signature",
        "x-hub-signature-256",
    }
)


def sanitize_headers(headers) -> dict[str, str]:
    """Request headers without credentials or signatures."""
    return {k: v for k, v in headers.items() if k.lower() not in SENSITIVE_HEADERS}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs HTTP requests and responses with timing."""

    def __init__(self, app, log_requests: bool = True, log_responses: bool = True):
        super().__init__(app)
        self.log_requests = log_requests
        self.log_responses = log_responses

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.time()
        logger = get_logger(__name__)
        skip = self._should_skip_logging(request.url.path)

        if self.log_requests and not skip:
            self._log_request(request, logger)

        response = await call_next(request)

        process_time = time.time() - start_time

        settings = getattr(request.app.state, "settings", None)
        if settings and settings.is_development:
            response.headers["X-Process-Time"] = str(round(process_time * 1000, 2))

        if self.log_responses and not skip:
            self._log_response(request, response, process_time, logger)

        return response

    def _should_skip_logging(self, path: str) -> bool:
        # Health checks and docs are noise
        skip_suffixes = ("/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico")
        return path.rstrip("/").endswith(skip_suffixes)

    def _log_request(self, request: Request, logger) -> None:
        log_data: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "headers": sanitize_headers(request.headers),
            "client_host": request.client.host if request.client else "unknown",
            "content_length": request.headers.get("content-length"),
        }
        logger.debug(f"Incoming {request.method} {request.url.path}", extra={"request": log_data})

    def _log_response(
        self, request: Request, response: Response, process_time: float, logger
    ) -> None:
        status_code = response.status_code

        if status_code >= 500:
            log_level = "error"
        elif status_code >= 400:
            log_level = "warning"
        else:
            log_level = "info"

        process_time_ms = round(process_time * 1000, 2)
        message = (
            f"Response {status_code} for {request.method} {request.url.path} "
            f"({process_time_ms}ms)"
        )
        getattr(logger, log_level)(
            message,
            extra={
                "response": {
                    "status_code": status_code,
                    "process_time_ms": process_time_ms,
                    "content_type": response.headers.get("content-type", "unknown"),
                }
            },
        )

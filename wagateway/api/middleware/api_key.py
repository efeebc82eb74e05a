"""
API key middleware.

Every route requires an API key except the public ones: the health check, the
webhook (called by WhatsApp, which authenticates with its signature instead)
and, in development, the interactive docs.
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from wagateway.api.middleware.error_handler import error_response
from wagateway.auth.api_key import ApiKeyValidator, extract_api_key
from wagateway.core.exceptions import InvalidApiKeyError
from wagateway.core.logging.logger import get_logger

logger = get_logger(__name__)

_DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Rejects requests without a valid API key with a 401."""

    def __init__(self, app, validator: ApiKeyValidator, api_prefix: str = ""):
        super().__init__(app)
        self.validator = validator
        self.public_paths = (f"{api_prefix}/health", f"{api_prefix}/webhook")

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path

        if request.method == "OPTIONS" or self._is_public_endpoint(path):
            return await call_next(request)

        if not self.validator.is_valid(extract_api_key(request.headers)):
            logger.warning(f"API key rejected for {request.method} {path}")
            return error_response(InvalidApiKeyError())

        return await call_next(request)

    def _is_public_endpoint(self, path: str) -> bool:
        normalized = path.rstrip("/") or "/"
        if normalized in self.public_paths:
            return True
        return any(normalized.startswith(p) for p in _DOCS_PATHS)

"""
Exception taxonomy for wagateway.

Every error that can leave a request carries the HTTP status it maps to, so
the API layer translates them in one place (see
``wagateway.api.middleware.error_handler``).
"""

from typing import Any


class WagatewayError(Exception):
    """Base class for all wagateway errors."""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthError(WagatewayError):
    """Request could not be authenticated."""

    status_code = 401
    error_type = "authentication_error"


class MissingSignatureError(AuthError):
    """Signature checking is enforced but the request carried no signature."""

    def __init__(self, message: str = "Missing X-Hub-Signature-256 header"):
        super().__init__(message)


class InvalidSignatureError(AuthError):
    """Webhook signature does not match the request body."""

    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__(message)


class InvalidApiKeyError(AuthError):
    """API key missing or not in the allow-list."""

    def __init__(self, message: str = "API key authentication failed"):
        super().__init__(message)


class InvalidVerifyTokenError(AuthError):
    """Webhook subscription handshake rejected."""

    status_code = 403
    error_type = "verification_error"

    def __init__(self, message: str = "Invalid verify token"):
        super().__init__(message)


class ValidationError(WagatewayError):
    """Request body does not have the expected shape."""

    status_code = 400
    error_type = "validation_error"

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message)


class ConfigurationError(WagatewayError):
    """A server-side setting required by the operation is absent or malformed."""

    status_code = 400
    error_type = "configuration_error"


class GatewayError(WagatewayError):
    """
    Uniform failure of a WhatsApp Cloud API call.

    ``status_code`` is the provider's HTTP status when a response was received,
    500 otherwise. ``details`` is the provider's error body when available,
    else the transport error message.
    """

    error_type = "gateway_error"

    def __init__(self, status_code: int, details: Any):
        self.status_code = status_code
        self.details = details
        super().__init__(f"WhatsApp API request failed ({status_code}): {details}")

    @property
    def is_authentication_error(self) -> bool:
        """Provider rejected the access token."""
        return self.status_code == 401

    def to_response(self) -> dict[str, Any]:
        """Response body exposed to API consumers."""
        return {"message": "WhatsApp API request failed", "details": self.details}

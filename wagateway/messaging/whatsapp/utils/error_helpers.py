"""
WhatsApp error handling utilities.

Every failure of a WhatsApp Cloud API call goes through these helpers so that
callers only ever see a GatewayError with a status code and a details payload,
whatever the failure was (network error, provider 4xx or provider 5xx).
"""

import json
from typing import Any

import aiohttp

from wagateway.core.exceptions import GatewayError

INTERNAL_ERROR_STATUS = 500


async def read_error_details(response: aiohttp.ClientResponse) -> Any:
    """Provider error body: parsed JSON when possible, raw text otherwise."""
    try:
        text = await response.text()
    except (aiohttp.ClientError, UnicodeDecodeError) as e:
        return f"Error reading response: {e}"

    if not text:
        return response.reason or f"HTTP {response.status}"

    try:
        return json.loads(text)
    except ValueError:
        return text


def translate_transport_error(error: Exception) -> GatewayError:
    """Map a failure that produced no provider response to a GatewayError."""
    message = str(error) or type(error).__name__
    return GatewayError(status_code=INTERNAL_ERROR_STATUS, details=message)


def describe_provider_error(details: Any) -> str:
    """Short human-readable message out of a provider error body."""
    if isinstance(details, dict):
        error = details.get("error")
        if isinstance(error, dict):
            message = error.get("message") or "Unknown error"
            code = error.get("code")
            return f"{message} (code {code})" if code is not None else message
    return str(details)


def log_gateway_error(
    error: GatewayError,
    operation: str,
    target: str | None,
    logger,
) -> None:
    """Log a failed gateway call with consistent context.

    Args:
        error: The translated gateway error
        operation: Description of the operation (e.g. "send text message")
        target: Recipient or message id the call concerned
        logger: Logger instance
    """
    if error.is_authentication_error:
        logger.critical(
            f"WhatsApp access token expired or invalid - cannot {operation}. "
            "Update WHATSAPP_ACCESS_TOKEN."
        )

    logger.error(
        f"Failed to {operation} for {target or 'unknown'}: "
        f"[{error.status_code}] {describe_provider_error(error.details)}"
    )

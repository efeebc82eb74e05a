"""
Webhook controller.

Routes hand over the HTTP-level pieces (query parameters, raw body, signature
header); the controller validates them and delegates to the verification
handshake or to the WebhookDispatcher.
"""

import json

from fastapi import Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError as PydanticValidationError

from wagateway.core.config.settings import Settings
from wagateway.core.constants import SIGNATURE_HEADER
from wagateway.core.exceptions import ValidationError
from wagateway.core.logging.context import get_context_info
from wagateway.core.logging.logger import get_logger
from wagateway.webhooks.whatsapp.dispatcher import WebhookDispatcher
from wagateway.webhooks.whatsapp.models import WebhookEnvelope
from wagateway.webhooks.whatsapp.verification import verify_subscription


class WebhookController:
    """Handles the subscription handshake and webhook deliveries."""

    def __init__(self):
        self.logger = get_logger(__name__)

    async def verify_webhook(
        self,
        settings: Settings,
        hub_mode: str,
        hub_verify_token: str,
        hub_challenge: str,
    ) -> PlainTextResponse:
        """
        Answer the subscription handshake.

        Returns:
            PlainTextResponse echoing ``hub.challenge``

        Raises:
            InvalidVerifyTokenError: Wrong mode or verify token (403)
        """
        self.logger.info(f"Webhook verification request, mode: {hub_mode}")
        challenge = verify_subscription(
            mode=hub_mode,
            challenge=hub_challenge,
            verify_token=hub_verify_token,
            expected_token=settings.webhook_verify_token,
        )
        return PlainTextResponse(content=challenge)

    async def process_webhook(
        self, request: Request, dispatcher: WebhookDispatcher
    ) -> dict[str, str]:
        """
        Parse and dispatch one webhook delivery.

        The raw body is kept as received for the signature check.

        Returns:
            ``{"status": "received"}`` once the delivery has been handled

        Raises:
            ValidationError: Body is not JSON or not an envelope (400)
            AuthError: Signature missing or invalid (401)
        """
        raw_body = await request.body()
        envelope = self._parse_envelope(raw_body)

        await dispatcher.handle(
            envelope,
            raw_body=raw_body,
            signature_header=request.headers.get(SIGNATURE_HEADER),
        )
        self.logger.debug(f"Webhook handled, context: {get_context_info()}")
        return {"status": "received"}

    def _parse_envelope(self, raw_body: bytes) -> WebhookEnvelope:
        try:
            payload = json.loads(raw_body)
        except ValueError as e:
            self.logger.error(f"Failed to parse webhook payload: {e}")
            raise ValidationError("Invalid JSON payload", field="body") from e

        if not isinstance(payload, dict):
            raise ValidationError("Webhook payload must be a JSON object", field="body")

        try:
            return WebhookEnvelope.model_validate(payload)
        except PydanticValidationError as e:
            self.logger.error(f"Webhook payload has an unexpected shape: {e.error_count()} error(s)")
            raise ValidationError("Invalid webhook payload", field="body") from e

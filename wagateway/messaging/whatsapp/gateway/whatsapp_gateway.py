"""
Outbound gateway to the WhatsApp Cloud API.

Builds the provider payload for every outbound message kind and sends it
through the WhatsAppClient:
- Messages: send_text, send_template, send_media, send_interactive, send_custom
- Read receipts: mark_read
- Account reads: get_business_profile, list_templates

Every non-custom send has the same envelope: ``messaging_product``, ``to``, a
``type`` discriminator and a sub-object named after the type.
"""

from typing import Any

from wagateway.core.constants import MESSAGING_PRODUCT
from wagateway.core.exceptions import ConfigurationError, GatewayError
from wagateway.core.logging.logger import get_logger
from wagateway.messaging.whatsapp.client.whatsapp_client import WhatsAppClient
from wagateway.messaging.whatsapp.models.outbound_models import (
    MediaSource,
    MediaType,
    TemplateComponent,
)
from wagateway.messaging.whatsapp.utils.error_helpers import log_gateway_error

ProviderResponse = dict[str, Any]


def _first_message_id(response: ProviderResponse) -> str | None:
    messages = response.get("messages") or [{}]
    return messages[0].get("id") if isinstance(messages[0], dict) else None


class WhatsAppGateway:
    """
    WhatsApp implementation of every outbound operation the service performs.

    Failures surface as GatewayError with the provider's status and details;
    callers decide whether a failure is fatal.
    """

    def __init__(self, client: WhatsAppClient, business_account_id: str | None = None):
        """
        Args:
            client: Configured WhatsApp client
            business_account_id: WhatsApp Business Account id, needed for templates
        """
        self.client = client
        self.business_account_id = business_account_id
        self.logger = get_logger(__name__)

    async def _send(
        self, payload: dict[str, Any], operation: str, target: str | None
    ) -> ProviderResponse:
        try:
            response = await self.client.post_request(payload)
        except GatewayError as e:
            log_gateway_error(e, operation, target, self.logger)
            raise

        message_id = _first_message_id(response)
        if message_id:
            self.logger.info(f"{operation.capitalize()} succeeded for {target}, id: {message_id}")
        else:
            self.logger.info(f"{operation.capitalize()} succeeded for {target}")
        return response

    def _envelope(self, to: str, message_type: str, content: dict[str, Any]) -> dict[str, Any]:
        return {
            "messaging_product": MESSAGING_PRODUCT,
            "to": to,
            "type": message_type,
            message_type: content,
        }

    async def send_text(
        self, to: str, body: str, preview_url: bool = False
    ) -> ProviderResponse:
        """Send a text message.

        Args:
            to: Recipient WhatsApp id
            body: Text content
            preview_url: Whether WhatsApp renders a preview for the first URL

        Returns:
            Provider response (contains the sent message id)
        """
        payload = self._envelope(to, "text", {"body": body, "preview_url": preview_url})
        self.logger.debug(f"Sending text message to {to}: {body[:50]}...")
        return await self._send(payload, "send text message", to)

    async def send_template(
        self,
        to: str,
        template_name: str,
        language_code: str,
        components: list[TemplateComponent | dict[str, Any]] | None = None,
    ) -> ProviderResponse:
        """Send an approved message template.

        Args:
            to: Recipient WhatsApp id
            template_name: Name of the approved template
            language_code: Template language code (e.g. ``id``, ``en_US``)
            components: Optional header/body/button parameters
        """
        template: dict[str, Any] = {
            "name": template_name,
            "language": {"code": language_code},
        }
        if components:
            template["components"] = [
                c.model_dump(exclude_none=True) if isinstance(c, TemplateComponent) else c
                for c in components
            ]

        payload = self._envelope(to, "template", template)
        return await self._send(payload, f"send template '{template_name}'", to)

    async def send_media(
        self,
        to: str,
        media_type: MediaType,
        source: MediaSource,
        caption: str | None = None,
    ) -> ProviderResponse:
        """Send an image, video, audio, document or sticker.

        Args:
            to: Recipient WhatsApp id
            media_type: Kind of media
            source: Either a MediaLink (public URL) or a MediaId (uploaded media)
            caption: Optional caption
        """
        media = source.to_payload()
        if caption:
            media["caption"] = caption

        payload = self._envelope(to, media_type.value, media)
        return await self._send(payload, f"send {media_type.value} message", to)

    async def send_interactive(
        self,
        to: str,
        interactive: dict[str, Any],
        recipient_type: str = "individual",
    ) -> ProviderResponse:
        """Send an interactive (buttons, list, CTA...) message as given."""
        payload = {
            "messaging_product": MESSAGING_PRODUCT,
            "recipient_type": recipient_type,
            "to": to,
            "type": "interactive",
            "interactive": interactive,
        }
        return await self._send(payload, "send interactive message", to)

    async def send_custom(self, payload: dict[str, Any]) -> ProviderResponse:
        """Send a caller-built provider payload.

        The payload is merged over an envelope holding only ``messaging_product``;
        the caller is trusted to supply a well-formed message.
        """
        merged = {"messaging_product": MESSAGING_PRODUCT, **payload}
        return await self._send(merged, "send custom message", payload.get("to"))

    async def mark_read(self, message_id: str | None) -> ProviderResponse | None:
        """Mark an inbound message as read.

        Returns:
            Provider response, or None without any request when ``message_id`` is empty
        """
        if not message_id:
            return None

        payload = {
            "messaging_product": MESSAGING_PRODUCT,
            "status": "read",
            "message_id": message_id,
        }
        self.logger.debug(f"Marking message {message_id} as read")
        return await self._send(payload, "mark message as read", message_id)

    async def get_business_profile(self) -> ProviderResponse:
        """Business profile of the sender phone number."""
        url = self.client.url_builder.get_business_profile_url()
        try:
            return await self.client.get_request(url)
        except GatewayError as e:
            log_gateway_error(e, "get business profile", self.client.phone_number_id, self.logger)
            raise

    async def list_templates(
        self, limit: int | None = None, after: str | None = None
    ) -> ProviderResponse:
        """List message templates of the business account.

        Args:
            limit: Page size
            after: Pagination cursor

        Raises:
            ConfigurationError: No business account id configured (no request is made)
            GatewayError: Provider call failed
        """
        if not self.business_account_id:
            raise ConfigurationError(
                "WHATSAPP_BUSINESS_ACCOUNT_ID is required to list message templates"
            )

        url = self.client.url_builder.get_message_templates_url(self.business_account_id)
        try:
            return await self.client.get_request(url, params={"limit": limit, "after": after})
        except GatewayError as e:
            log_gateway_error(e, "list message templates", self.business_account_id, self.logger)
            raise

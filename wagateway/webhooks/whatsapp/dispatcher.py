"""
Webhook dispatcher for WhatsApp event callbacks.

Per request this is a fixed three level walk: entries → changes → typed
sub-items. The change ``field`` selects the handler; each leaf (message,
status, template event) is handled in isolation so that one failure never
aborts its siblings. Only the signature check can fail the request; once it
passes, the webhook is always acknowledged.
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from wagateway.core.exceptions import GatewayError
from wagateway.core.logging.context import (
    bind_user_context,
    reset_user_context,
    set_request_context,
)
from wagateway.core.logging.logger import get_logger
from wagateway.messaging.whatsapp.gateway.whatsapp_gateway import WhatsAppGateway
from wagateway.webhooks.whatsapp.models import (
    ChangeField,
    ChangeValue,
    DeliveryState,
    DeliveryStatus,
    InboundMessage,
    MessagesValue,
    StatusesValue,
    TemplateUpdateValue,
    WebhookChange,
    WebhookEntry,
    WebhookEnvelope,
)
from wagateway.webhooks.whatsapp.signature import SignatureVerifier

ChangeHandler = Callable[[Any, str], Awaitable[None]]
ItemT = TypeVar("ItemT", bound=BaseModel)


def format_event(kind: str, message: str, **meta: Any) -> str:
    """Render ``[kind] message {meta as json}``, skipping empty metadata."""
    base = f"[{kind}] {message}"
    if not meta:
        return base
    return f"{base} {json.dumps(meta, default=str, ensure_ascii=False)}"


class WebhookDispatcher:
    """Verifies, classifies and handles inbound webhook envelopes."""

    def __init__(
        self,
        gateway: WhatsAppGateway,
        signature_verifier: SignatureVerifier,
        business_phone_number_id: str,
        auto_reply_text: str,
    ):
        """
        Args:
            gateway: Outbound gateway used for read receipts and auto-replies
            signature_verifier: Verifier holding the app secret (or none)
            business_phone_number_id: Configured sender phone number id, used
                when a change carries no metadata
            auto_reply_text: Text sent back to every non-business sender
        """
        self.gateway = gateway
        self.signature_verifier = signature_verifier
        self.business_phone_number_id = business_phone_number_id
        self.auto_reply_text = auto_reply_text
        self.logger = get_logger(__name__)

        self._handlers: dict[ChangeField, ChangeHandler] = {
            ChangeField.MESSAGES: self._handle_messages,
            ChangeField.STATUSES: self._handle_statuses,
            ChangeField.TEMPLATE_STATUS_UPDATE: self._handle_template_update,
            ChangeField.TEMPLATE_CATEGORY_UPDATE: self._handle_template_update,
        }

    async def handle(
        self,
        envelope: WebhookEnvelope,
        raw_body: bytes,
        signature_header: str | None = None,
    ) -> None:
        """
        Process one webhook delivery.

        Args:
            envelope: Parsed webhook payload
            raw_body: Request body exactly as received (signed bytes)
            signature_header: X-Hub-Signature-256 value, if any

        Raises:
            AuthError: Signature missing or invalid; no entry is processed
        """
        self.logger.debug(
            format_event(
                "webhook",
                "Received webhook payload",
                object=envelope.object,
                entries=len(envelope.entries),
            )
        )

        self.signature_verifier.verify(raw_body, signature_header)

        if not envelope.entries:
            self.logger.warning(format_event("webhook", "Received webhook with no entries"))
            return

        for entry in envelope.entries:
            await self._process_entry(entry)

    async def _process_entry(self, entry: WebhookEntry) -> None:
        self.logger.debug(
            format_event(
                "webhook", "Processing entry", entryId=entry.id, changes=len(entry.changes)
            )
        )

        if not entry.changes:
            self.logger.warning(
                format_event("webhook", "Entry had no changes array", entryId=entry.id)
            )
            return

        for change in entry.changes:
            await self._dispatch_change(entry, change)

    async def _dispatch_change(self, entry: WebhookEntry, change: WebhookChange) -> None:
        field = change.field_name
        self.logger.debug(
            format_event(
                field,
                "Processing change",
                entryId=entry.id,
                hasValue=change.value is not None,
                topLevelKeys=sorted(change.value) if isinstance(change.value, dict) else None,
            )
        )

        handler = self._handlers.get(change.known_field)
        if handler is None:
            self.logger.warning(format_event("webhook", "Unhandled webhook field", field=field))
            return

        try:
            value: ChangeValue | None = change.parse_value()
        except PydanticValidationError as e:
            self.logger.error(
                format_event(
                    field,
                    "Malformed change value, skipping",
                    entryId=entry.id,
                    errors=e.errors(include_url=False, include_input=False),
                )
            )
            return

        # A failing handler never fails the acknowledgement
        try:
            await handler(value, field)
        except Exception as e:
            self.logger.error(
                format_event(field, "Change handler failed", entryId=entry.id, error=str(e)),
                exc_info=True,
            )

    def _parse_item(self, model: type[ItemT], raw: Any, kind: str) -> ItemT | None:
        """Validate one message or status; a malformed item is logged and skipped."""
        try:
            return model.model_validate(raw)
        except PydanticValidationError as e:
            self.logger.error(
                format_event(
                    kind,
                    "Malformed item, skipping",
                    id=raw.get("id") if isinstance(raw, dict) else None,
                    errors=e.errors(include_url=False, include_input=False),
                )
            )
            return None

    # ------------------------------------------------------------------
    # messages
    # ------------------------------------------------------------------

    def is_from_business(self, sender: str | None, metadata_phone_number_id: str | None) -> bool:
        """Whether ``sender`` is the service's own messaging identity."""
        if not sender:
            return False
        return sender == (metadata_phone_number_id or self.business_phone_number_id)

    async def _handle_messages(self, value: MessagesValue, field: str) -> None:
        metadata_phone_id = value.business_phone_number_id
        set_request_context(phone_number_id=metadata_phone_id or self.business_phone_number_id)

        if not value.messages:
            self.logger.warning(
                format_event(
                    "messages",
                    "Change payload contained no messages",
                    metadata=value.metadata.model_dump() if value.metadata else None,
                    contacts=[c.wa_id for c in value.contacts],
                )
            )
            return

        self.logger.debug(
            format_event(
                "messages",
                "Processing messages change",
                messageCount=len(value.messages),
                phoneNumberId=metadata_phone_id,
            )
        )

        for raw_message in value.messages:
            message = self._parse_item(InboundMessage, raw_message, "messages")
            if message is None:
                continue

            token = bind_user_context(message.from_)
            try:
                await self._handle_message(message, metadata_phone_id)
            except Exception as e:
                self.logger.error(
                    format_event(
                        "messages",
                        "Failed to process message",
                        messageId=message.id,
                        sender=message.from_,
                        error=str(e),
                    ),
                    exc_info=True,
                )
            finally:
                reset_user_context(token)

    async def _handle_message(
        self, message: InboundMessage, metadata_phone_number_id: str | None
    ) -> None:
        sender = message.from_
        self.logger.info(
            format_event(
                "messages",
                "Received incoming message",
                sender=sender or "unknown",
                type=message.type or "unknown",
                messageId=message.id,
                timestamp=message.timestamp,
            )
        )

        if message.reply_to_id:
            self.logger.debug(
                format_event(
                    "messages", "Message references previous context", replyTo=message.reply_to_id
                )
            )

        if message.text_body:
            self.logger.debug(
                format_event("messages", "Message body captured", snippet=message.text_body[:160])
            )

        if not sender:
            self.logger.warning(
                format_event(
                    "messages", "Skipping message with unknown sender", messageId=message.id
                )
            )
            return

        if self.is_from_business(sender, metadata_phone_number_id):
            self.logger.debug(
                format_event("messages", "Skipping business-originated message", sender=sender)
            )
            return

        await self._mark_read(message)
        await self._send_auto_reply(sender)

    async def _mark_read(self, message: InboundMessage) -> None:
        # Best effort
        try:
            await self.gateway.mark_read(message.id)
        except GatewayError as e:
            self.logger.error(
                format_event(
                    "messages",
                    "Failed to mark message as read",
                    messageId=message.id,
                    status=e.status_code,
                    details=e.details,
                )
            )
            return

        self.logger.debug(format_event("messages", "Marked message as read", messageId=message.id))

    async def _send_auto_reply(self, recipient: str) -> None:
        # Best effort
        self.logger.info(format_event("messages", "Dispatching auto reply", to=recipient))
        try:
            await self.gateway.send_text(to=recipient, body=self.auto_reply_text, preview_url=True)
        except GatewayError as e:
            self.logger.error(
                format_event(
                    "messages",
                    "Failed to send auto reply",
                    recipient=recipient,
                    status=e.status_code,
                    details=e.details,
                )
            )
            return

        self.logger.info(
            format_event(
                "messages", "Auto reply dispatched", to=recipient, length=len(self.auto_reply_text)
            )
        )

    # ------------------------------------------------------------------
    # statuses and templates (observational only)
    # ------------------------------------------------------------------

    async def _handle_statuses(self, value: StatusesValue, field: str) -> None:
        if not value.statuses:
            self.logger.warning(
                format_event(
                    "statuses",
                    "Change payload contained no statuses",
                    metadata=value.metadata.model_dump() if value.metadata else None,
                )
            )
            return

        for raw_status in value.statuses:
            status = self._parse_item(DeliveryStatus, raw_status, "statuses")
            if status is None:
                continue

            log = (
                self.logger.warning
                if status.status == DeliveryState.FAILED.value
                else self.logger.info
            )
            log(
                format_event(
                    "statuses",
                    "Received status update",
                    messageId=status.id,
                    status=status.status,
                    recipientId=status.recipient_id,
                )
            )
            for error in status.errors:
                self.logger.error(
                    format_event(
                        "statuses",
                        "Delivery error received",
                        messageId=status.id,
                        code=error.code,
                        title=error.title,
                        description=error.message,
                    )
                )

    async def _handle_template_update(self, value: TemplateUpdateValue, field: str) -> None:
        if not value.template_id and not value.event:
            self.logger.warning(
                format_event("templates", "Template update missing required details", field=field)
            )
            return

        self.logger.info(
            format_event(
                "templates",
                "Received template event",
                field=field,
                templateId=value.template_id,
                templateName=value.template_name,
                templateLanguage=value.template_language,
                event=value.event,
            )
        )

        if value.reason:
            self.logger.warning(
                format_event("templates", "Template update reason provided", reason=value.reason)
            )

        for failure in value.failures:
            self.logger.error(
                format_event(
                    "templates",
                    "Template failure received",
                    code=failure.code,
                    title=failure.title,
                    description=failure.message,
                )
            )

"""
Webhook envelope models for the WhatsApp Business Platform.

The envelope is parsed leniently: every field is optional and unknown keys are
ignored, because the provider adds fields over time and an envelope missing
pieces is still acknowledged. A change keeps its ``value`` raw until the
dispatcher asks for the variant that matches its ``field``, and the messages
and statuses inside a variant stay raw until each one is handled.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class ChangeField(str, Enum):
    """Change topics the dispatcher knows how to handle."""

    MESSAGES = "messages"
    STATUSES = "statuses"
    TEMPLATE_STATUS_UPDATE = "message_template_status_update"
    TEMPLATE_CATEGORY_UPDATE = "message_template_category_update"


class InboundMessageType(str, Enum):
    """Inbound message types carried in a ``messages`` change."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    INTERACTIVE = "interactive"
    BUTTON = "button"
    LOCATION = "location"
    CONTACTS = "contacts"


class DeliveryState(str, Enum):
    """Delivery states reported for outbound messages."""

    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"


class _WebhookModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore", populate_by_name=True, frozen=True, coerce_numbers_to_str=True
    )

    @field_validator("*", mode="before")
    @classmethod
    def _null_list_as_empty(cls, v: Any, info: ValidationInfo) -> Any:
        """Treat an explicit null array as an empty one."""
        if v is None and cls.model_fields[info.field_name].default_factory is list:
            return []
        return v


class ProviderErrorDetail(_WebhookModel):
    """Error object embedded in statuses and template updates."""

    code: int | None = None
    title: str | None = None
    message: str | None = None


class WebhookMetadata(_WebhookModel):
    """Business phone number that received or sent the message."""

    display_phone_number: str | None = None
    phone_number_id: str | None = None


class ContactProfile(_WebhookModel):
    name: str | None = None


class WebhookContact(_WebhookModel):
    """Sender information delivered alongside inbound messages."""

    wa_id: str | None = None
    profile: ContactProfile | None = None

    @property
    def profile_name(self) -> str | None:
        return self.profile.name if self.profile else None


class MessageContext(_WebhookModel):
    """Reference to the message this one replies to."""

    from_: str | None = Field(None, alias="from")
    id: str | None = None


class TextContent(_WebhookModel):
    body: str | None = None


class MediaContent(_WebhookModel):
    """Image, audio and video payloads of inbound messages."""

    id: str | None = None
    caption: str | None = None
    mime_type: str | None = None
    sha256: str | None = None


class ButtonContent(_WebhookModel):
    payload: str | None = None
    text: str | None = None


class LocationContent(_WebhookModel):
    latitude: float | None = None
    longitude: float | None = None
    name: str | None = None
    address: str | None = None


class InboundMessage(_WebhookModel):
    """
    A message received by the business number.

    Only the payload matching ``type`` is expected to be present.
    """

    from_: str | None = Field(None, alias="from")
    id: str | None = None
    timestamp: str | None = None
    type: str | None = None
    text: TextContent | None = None
    image: MediaContent | None = None
    audio: MediaContent | None = None
    video: MediaContent | None = None
    interactive: dict[str, Any] | None = None
    button: ButtonContent | None = None
    location: LocationContent | None = None
    contacts: list[dict[str, Any]] | None = None
    context: MessageContext | None = None

    @property
    def text_body(self) -> str | None:
        """Text body for ``text`` messages, None for every other type."""
        if self.type == InboundMessageType.TEXT.value and self.text:
            return self.text.body
        return None

    @property
    def reply_to_id(self) -> str | None:
        return self.context.id if self.context else None


class MessagesValue(_WebhookModel):
    """Value of a ``messages`` change."""

    messaging_product: str | None = None
    metadata: WebhookMetadata | None = None
    contacts: list[WebhookContact] = Field(default_factory=list)
    # Raw items, validated one by one into InboundMessage by the dispatcher
    messages: list[Any] = Field(default_factory=list)

    @property
    def business_phone_number_id(self) -> str | None:
        return self.metadata.phone_number_id if self.metadata else None


class DeliveryStatus(_WebhookModel):
    """Delivery report for a message previously sent by the business."""

    id: str | None = None
    status: str | None = None
    timestamp: str | None = None
    recipient_id: str | None = None
    conversation: dict[str, Any] | None = None
    pricing: dict[str, Any] | None = None
    errors: list[ProviderErrorDetail] = Field(default_factory=list)


class StatusesValue(_WebhookModel):
    """Value of a ``statuses`` change."""

    messaging_product: str | None = None
    metadata: WebhookMetadata | None = None
    # Raw items, validated one by one into DeliveryStatus by the dispatcher
    statuses: list[Any] = Field(default_factory=list)


class TemplateUpdateValue(_WebhookModel):
    """Value of a template status or category update."""

    template_id: str | None = Field(None, alias="message_template_id")
    template_name: str | None = Field(None, alias="message_template_name")
    template_language: str | None = Field(None, alias="message_template_language")
    event: str | None = None
    reason: str | None = None
    failures: list[ProviderErrorDetail] = Field(default_factory=list)


ChangeValue = MessagesValue | StatusesValue | TemplateUpdateValue

_VALUE_MODELS: dict[ChangeField, type[_WebhookModel]] = {
    ChangeField.MESSAGES: MessagesValue,
    ChangeField.STATUSES: StatusesValue,
    ChangeField.TEMPLATE_STATUS_UPDATE: TemplateUpdateValue,
    ChangeField.TEMPLATE_CATEGORY_UPDATE: TemplateUpdateValue,
}


class WebhookChange(_WebhookModel):
    """One topic-scoped change inside an entry."""

    field: str | None = None
    value: Any = None

    @property
    def field_name(self) -> str:
        """Discriminator, with a missing field reported as ``unknown``."""
        return self.field or "unknown"

    @property
    def known_field(self) -> ChangeField | None:
        try:
            return ChangeField(self.field_name)
        except ValueError:
            return None

    def parse_value(self) -> ChangeValue | None:
        """
        Parse ``value`` into the variant selected by ``field``.

        Returns:
            The typed variant, or None for unknown fields

        Raises:
            pydantic.ValidationError: If the value is not an object or does
                not fit its variant
        """
        known = self.known_field
        if known is None:
            return None
        return _VALUE_MODELS[known].model_validate({} if self.value is None else self.value)


class WebhookEntry(_WebhookModel):
    """Changes grouped by WhatsApp Business Account."""

    id: str | None = None
    changes: list[WebhookChange] = Field(default_factory=list)


class WebhookEnvelope(_WebhookModel):
    """Top-level webhook payload (wire key for entries is ``entry``)."""

    object: str | None = None
    entries: list[WebhookEntry] = Field(default_factory=list, alias="entry")

"""
Outbound message models for WhatsApp messaging.

Pydantic schemas for the REST bodies accepted by ``/messages/*`` (camelCase on
the wire, unknown fields rejected) and the value types the gateway takes.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MediaType(Enum):
    """Supported media types for WhatsApp media messages."""

    AUDIO = "audio"
    DOCUMENT = "document"
    IMAGE = "image"
    STICKER = "sticker"
    VIDEO = "video"


class MediaLink(BaseModel):
    """Media hosted at a public URL."""

    model_config = ConfigDict(frozen=True)

    link: str = Field(..., min_length=1)

    def to_payload(self) -> dict[str, str]:
        return {"link": self.link}


class MediaId(BaseModel):
    """Media previously uploaded to WhatsApp."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)

    def to_payload(self) -> dict[str, str]:
        return {"id": self.id}


MediaSource = MediaLink | MediaId


class _RequestModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid", populate_by_name=True, str_strip_whitespace=True
    )


class SendTextRequest(_RequestModel):
    """Body of ``POST /messages/text``."""

    to: str = Field(..., min_length=1, description="Recipient WhatsApp id")
    body: str = Field(..., min_length=1, description="Text content of the message")
    preview_url: bool = Field(
        False, alias="previewUrl", description="Render a preview for the first URL"
    )


class TemplateParameter(BaseModel):
    """Parameter substituted into a template component."""

    model_config = ConfigDict(extra="forbid")

    type: Literal[
        "text",
        "currency",
        "date_time",
        "image",
        "document",
        "video",
        "payload",
        "button",
    ]
    sub_type: str | None = None
    text: str | None = None
    currency: dict[str, Any] | None = None
    date_time: dict[str, Any] | None = None
    image: dict[str, Any] | None = None
    document: dict[str, Any] | None = None
    video: dict[str, Any] | None = None
    payload: str | None = None


class TemplateComponent(BaseModel):
    """Template component (header, body, button or footer)."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["header", "body", "button", "footer"]
    sub_type: str | None = None
    index: str | int | None = None
    parameters: list[TemplateParameter] | None = None


class SendTemplateRequest(_RequestModel):
    """Body of ``POST /messages/template``."""

    to: str = Field(..., min_length=1)
    template_name: str = Field(..., min_length=1, alias="templateName")
    language: str = Field(..., min_length=1, description="Template language code")
    components: list[TemplateComponent] | None = None


class SendMediaRequest(_RequestModel):
    """
    Body of ``POST /messages/media``.

    Exactly one of ``link`` and ``id`` must be given.
    """

    to: str = Field(..., min_length=1)
    type: MediaType
    link: str | None = Field(None, min_length=1)
    id: str | None = Field(None, min_length=1)
    caption: str | None = None

    @model_validator(mode="after")
    def validate_single_source(self):
        if (self.link is None) == (self.id is None):
            raise ValueError("Exactly one of 'link' or 'id' must be provided")
        return self

    @property
    def source(self) -> MediaSource:
        if self.link is not None:
            return MediaLink(link=self.link)
        return MediaId(id=self.id)


class SendInteractiveRequest(_RequestModel):
    """Body of ``POST /messages/interactive``."""

    to: str = Field(..., min_length=1)
    recipient_type: Literal["individual", "group"] = Field(
        "individual", alias="recipientType"
    )
    interactive: dict[str, Any]


class SendCustomRequest(_RequestModel):
    """Body of ``POST /messages/custom``; ``payload`` is forwarded as-is."""

    payload: dict[str, Any]


class MarkReadRequest(_RequestModel):
    """Body of ``POST /messages/mark-read``."""

    message_id: str = Field(..., min_length=1, alias="messageId")


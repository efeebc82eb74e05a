"""WhatsApp outbound request models."""

from .outbound_models import (
    MarkReadRequest,
    MediaId,
    MediaLink,
    MediaSource,
    MediaType,
    SendCustomRequest,
    SendInteractiveRequest,
    SendMediaRequest,
    SendTemplateRequest,
    SendTextRequest,
    TemplateComponent,
    TemplateParameter,
)

__all__ = [
    "MarkReadRequest",
    "MediaId",
    "MediaLink",
    "MediaSource",
    "MediaType",
    "SendCustomRequest",
    "SendInteractiveRequest",
    "SendMediaRequest",
    "SendTemplateRequest",
    "SendTextRequest",
    "TemplateComponent",
    "TemplateParameter",
]

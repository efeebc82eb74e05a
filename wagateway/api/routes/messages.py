"""
WhatsApp messaging API endpoints.

- POST /messages/text, /template, /media, /interactive, /custom: send a message
- POST /messages/mark-read: send a read receipt (204)
- GET  /messages/profile: business profile of the sender number
- GET  /messages/templates: message templates of the business account

Provider failures are returned transparently with the provider's status and
error body (see GatewayError).
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Response, status

from wagateway.api.dependencies.whatsapp_dependencies import get_gateway
from wagateway.core.logging.logger import get_logger
from wagateway.messaging.whatsapp.gateway.whatsapp_gateway import WhatsAppGateway
from wagateway.messaging.whatsapp.models.outbound_models import (
    MarkReadRequest,
    SendCustomRequest,
    SendInteractiveRequest,
    SendMediaRequest,
    SendTemplateRequest,
    SendTextRequest,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/messages",
    tags=["WhatsApp - Messages"],
    responses={
        400: {"description": "Bad Request - Invalid message format or missing configuration"},
        401: {"description": "Unauthorized - Invalid API key"},
        500: {"description": "Internal Server Error - WhatsApp API unreachable"},
    },
)


@router.post(
    "/text",
    summary="Send Text Message",
    description="Send a text message with optional URL preview",
)
async def send_text_message(
    request: SendTextRequest, gateway: WhatsAppGateway = Depends(get_gateway)
) -> dict[str, Any]:
    """Send a text message via WhatsApp.

    Args:
        request: Recipient, text and preview flag
        gateway: WhatsApp gateway (injected)

    Returns:
        WhatsApp API response with the sent message id
    """
    logger.info(f"Sending text message to {request.to}")
    return await gateway.send_text(
        to=request.to, body=request.body, preview_url=request.preview_url
    )


@router.post(
    "/template",
    summary="Send Template Message",
    description="Send an approved message template with optional parameters",
)
async def send_template_message(
    request: SendTemplateRequest, gateway: WhatsAppGateway = Depends(get_gateway)
) -> dict[str, Any]:
    logger.info(f"Sending template '{request.template_name}' to {request.to}")
    return await gateway.send_template(
        to=request.to,
        template_name=request.template_name,
        language_code=request.language,
        components=request.components,
    )


@router.post(
    "/media",
    summary="Send Media Message",
    description="Send an image, video, audio, document or sticker by link or media id",
)
async def send_media_message(
    request: SendMediaRequest, gateway: WhatsAppGateway = Depends(get_gateway)
) -> dict[str, Any]:
    """Send a media message.

    Exactly one of ``link`` and ``id`` must be supplied; anything else is
    rejected with a 400 before WhatsApp is called.
    """
    logger.info(f"Sending {request.type.value} message to {request.to}")
    return await gateway.send_media(
        to=request.to,
        media_type=request.type,
        source=request.source,
        caption=request.caption,
    )


@router.post(
    "/interactive",
    summary="Send Interactive Message",
    description="Send a button, list or CTA message; the interactive object is forwarded as-is",
)
async def send_interactive_message(
    request: SendInteractiveRequest, gateway: WhatsAppGateway = Depends(get_gateway)
) -> dict[str, Any]:
    logger.info(f"Sending interactive message to {request.to}")
    return await gateway.send_interactive(
        to=request.to,
        interactive=request.interactive,
        recipient_type=request.recipient_type,
    )


@router.post(
    "/custom",
    summary="Send Custom Message",
    description="Send a caller-built WhatsApp message payload",
)
async def send_custom_message(
    request: SendCustomRequest, gateway: WhatsAppGateway = Depends(get_gateway)
) -> dict[str, Any]:
    logger.info(f"Sending custom message to {request.payload.get('to', 'unknown')}")
    return await gateway.send_custom(request.payload)


@router.post(
    "/mark-read",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Mark Message as Read",
)
async def mark_message_as_read(
    request: MarkReadRequest, gateway: WhatsAppGateway = Depends(get_gateway)
) -> Response:
    """Mark an inbound WhatsApp message as read."""
    logger.info(f"Marking message {request.message_id} as read")
    await gateway.mark_read(request.message_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/profile", summary="Get Business Profile")
async def get_business_profile(
    gateway: WhatsAppGateway = Depends(get_gateway),
) -> dict[str, Any]:
    return await gateway.get_business_profile()


@router.get(
    "/templates",
    summary="List Message Templates",
    description="List templates of the configured WhatsApp Business Account",
)
async def list_message_templates(
    limit: int | None = Query(None, gt=0, description="Page size"),
    after: str | None = Query(None, description="Pagination cursor"),
    gateway: WhatsAppGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """List message templates.

    Returns 400 when WHATSAPP_BUSINESS_ACCOUNT_ID is not configured.
    """
    return await gateway.list_templates(limit=limit, after=after)

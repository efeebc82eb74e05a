"""
WhatsApp webhook routes.

- GET  /webhook: subscription handshake, echoes ``hub.challenge``
- POST /webhook: event delivery, signed with ``X-Hub-Signature-256``

Both are public (no API key); WhatsApp authenticates deliveries with the
signature instead.
"""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from wagateway.api.controllers import WebhookController
from wagateway.api.dependencies.whatsapp_dependencies import (
    get_app_settings,
    get_dispatcher,
)
from wagateway.core.config.settings import Settings
from wagateway.webhooks.whatsapp.dispatcher import WebhookDispatcher

webhook_controller = WebhookController()

router = APIRouter(
    prefix="/webhook",
    tags=["Webhooks"],
    responses={
        400: {"description": "Bad Request - Invalid webhook payload"},
        401: {"description": "Unauthorized - Missing or invalid signature"},
        403: {"description": "Forbidden - Webhook verification failed"},
    },
)


@router.get("", response_class=PlainTextResponse)
async def verify_webhook(
    hub_mode: str = Query(..., alias="hub.mode"),
    hub_verify_token: str = Query(..., alias="hub.verify_token"),
    hub_challenge: str = Query(..., alias="hub.challenge"),
    settings: Settings = Depends(get_app_settings),
):
    """
    Handle the webhook subscription handshake.

    Args:
        hub_mode: Verification mode, must be ``subscribe``
        hub_verify_token: Token configured in the WhatsApp app dashboard
        hub_challenge: Challenge string to echo back

    Returns:
        PlainTextResponse with the challenge
    """
    return await webhook_controller.verify_webhook(
        settings=settings,
        hub_mode=hub_mode,
        hub_verify_token=hub_verify_token,
        hub_challenge=hub_challenge,
    )


@router.post("")
async def process_webhook(
    request: Request, dispatcher: WebhookDispatcher = Depends(get_dispatcher)
) -> dict[str, str]:
    """
    Receive a webhook delivery.

    Individual event failures are logged and never change the response; only
    an invalid body (400) or signature (401) is rejected.
    """
    return await webhook_controller.process_webhook(request=request, dispatcher=dispatcher)

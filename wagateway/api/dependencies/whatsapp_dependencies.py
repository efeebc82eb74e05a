"""
WhatsApp dependency injection.

Builds the client, gateway and dispatcher per request from the settings and
the persistent HTTP session held in ``app.state`` (both set up in the app
lifespan).
"""

from fastapi import Depends, Request

from wagateway.core.config.settings import Settings
from wagateway.core.logging.logger import get_logger
from wagateway.messaging.whatsapp.client.whatsapp_client import WhatsAppClient
from wagateway.messaging.whatsapp.gateway.whatsapp_gateway import WhatsAppGateway
from wagateway.webhooks.whatsapp.dispatcher import WebhookDispatcher
from wagateway.webhooks.whatsapp.signature import SignatureVerifier


async def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


async def get_whatsapp_client(
    request: Request, settings: Settings = Depends(get_app_settings)
) -> WhatsAppClient:
    """Get a WhatsApp client bound to the configured business phone number.

    Args:
        request: FastAPI request object containing the HTTP session
        settings: Application settings

    Returns:
        WhatsApp client using the persistent session
    """
    session = request.app.state.http_session

    return WhatsAppClient(
        session=session,
        access_token=settings.access_token,
        phone_number_id=settings.phone_number_id,
        api_version=settings.api_version,
        base_url=settings.graph_url,
        timeout=settings.request_timeout,
        logger=get_logger("wagateway.messaging.whatsapp.client"),
    )


async def get_gateway(
    client: WhatsAppClient = Depends(get_whatsapp_client),
    settings: Settings = Depends(get_app_settings),
) -> WhatsAppGateway:
    """Get the outbound gateway for the configured business account."""
    return WhatsAppGateway(client=client, business_account_id=settings.business_account_id)


async def get_dispatcher(
    gateway: WhatsAppGateway = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> WebhookDispatcher:
    """Get a webhook dispatcher wired to the gateway and the signature secret."""
    return WebhookDispatcher(
        gateway=gateway,
        signature_verifier=SignatureVerifier(settings.effective_app_secret),
        business_phone_number_id=settings.phone_number_id,
        auto_reply_text=settings.auto_reply_text,
    )

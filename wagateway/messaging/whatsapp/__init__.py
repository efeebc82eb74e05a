"""
WhatsApp Cloud API outbound components.

    from wagateway.messaging.whatsapp import WhatsAppClient, WhatsAppGateway
"""

from .client import WhatsAppClient, WhatsAppUrlBuilder
from .gateway import WhatsAppGateway

__all__ = ["WhatsAppClient", "WhatsAppGateway", "WhatsAppUrlBuilder"]

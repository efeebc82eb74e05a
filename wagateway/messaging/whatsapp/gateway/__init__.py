"""WhatsApp outbound gateway."""

from .whatsapp_gateway import WhatsAppGateway

__all__ = ["WhatsAppGateway"]

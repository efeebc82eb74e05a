"""Routers of the wagateway API."""

from .health import router as health_router
from .messages import router as messages_router
from .webhooks import router as webhook_router

__all__ = ["health_router", "messages_router", "webhook_router"]

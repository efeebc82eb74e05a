"""Dependency injection for wagateway routes."""

from .whatsapp_dependencies import (
    get_app_settings,
    get_dispatcher,
    get_gateway,
    get_whatsapp_client,
)

__all__ = ["get_app_settings", "get_dispatcher", "get_gateway", "get_whatsapp_client"]

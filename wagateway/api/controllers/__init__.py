"""
API controllers for wagateway.

Controllers hold the request-level logic; routes only deal with HTTP
parameters and dependency injection.
"""

from .webhook_controller import WebhookController

__all__ = ["WebhookController"]

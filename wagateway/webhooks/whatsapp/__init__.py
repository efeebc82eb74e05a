"""
WhatsApp webhook components.

    from wagateway.webhooks.whatsapp import WebhookDispatcher, SignatureVerifier
"""

from .dispatcher import WebhookDispatcher
from .models import WebhookEnvelope
from .signature import SignatureVerifier, compute_signature
from .verification import verify_subscription

__all__ = [
    "SignatureVerifier",
    "WebhookDispatcher",
    "WebhookEnvelope",
    "compute_signature",
    "verify_subscription",
]

"""
wagateway - WhatsApp Cloud API webhook and messaging gateway.

Receives WhatsApp webhook deliveries (signature-checked, classified by change
field, answered with a read receipt and an auto-reply) and exposes an
API-key protected REST surface for sending messages.
"""

__version__ = "0.1.0"

"""Inbound webhook handling for wagateway."""

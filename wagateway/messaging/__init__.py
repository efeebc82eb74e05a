"""Outbound messaging components for wagateway."""

"""Configuration module for wagateway."""

from .settings import Settings, get_settings, parse_api_key_hashes

__all__ = ["Settings", "get_settings", "parse_api_key_hashes"]

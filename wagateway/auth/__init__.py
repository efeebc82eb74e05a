"""API key authentication for the REST surface."""

from .api_key import ApiKeyValidator, extract_api_key, hash_api_key

__all__ = ["ApiKeyValidator", "extract_api_key", "hash_api_key"]

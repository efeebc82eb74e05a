"""
API key validation.

Integrators present the SHA-256 hex digest of their key, and the accepted
digests are configured in ``AUTH_API_KEY_HASHES``. The presented digest is
checked against every stored digest in constant time.
"""

import hashlib
import hmac
import re
from collections.abc import Iterable, Mapping

_DIGEST_PATTERN = re.compile(r"[a-fA-F0-9]{64}")


def hash_api_key(raw_key: str) -> str:
    """SHA-256 hex digest of an API key, the value clients present."""
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def extract_api_key(headers: Mapping[str, str]) -> str | None:
    """
    Pull the API key out of request headers.

    ``Authorization: Bearer <key>`` wins over ``X-API-Key: <key>``.

    Args:
        headers: Case-insensitive request headers

    Returns:
        The presented key, or None when neither header carries one
    """
    authorization = headers.get("authorization")
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return value.strip()

    api_key = headers.get("x-api-key")
    if api_key and api_key.strip():
        return api_key.strip()

    return None


class ApiKeyValidator:
    """Checks presented API key digests against the configured allow-list."""

    def __init__(self, allowed_hashes: Iterable[bytes]):
        self.allowed_hashes = tuple(allowed_hashes)

    def is_valid(self, presented: str | None) -> bool:
        if not presented:
            return False

        digest = presented.strip()
        if not _DIGEST_PATTERN.fullmatch(digest):
            return False

        candidate = bytes.fromhex(digest)

        # Every digest is compared so timing does not reveal which one matched
        matched = False
        for stored in self.allowed_hashes:
            if hmac.compare_digest(stored, candidate):
                matched = True
        return matched

"""
Webhook signature verification.

WhatsApp signs every webhook delivery with HMAC-SHA256 over the raw request
body, keyed by the app secret, and sends it as ``X-Hub-Signature-256:
sha256=<hex>``. Verification must run on the exact bytes received: a
re-serialization of the parsed JSON is not guaranteed to be byte-identical.
"""

import hashlib
import hmac

from wagateway.core.constants import SIGNATURE_PREFIX
from wagateway.core.exceptions import InvalidSignatureError, MissingSignatureError
from wagateway.core.logging.logger import get_logger


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Lowercase hex HMAC-SHA256 of ``raw_body`` keyed by ``secret``."""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


class SignatureVerifier:
    """Checks webhook authenticity against the configured app secret."""

    def __init__(self, secret: str | None):
        """
        Args:
            secret: App secret; None disables enforcement
        """
        self.secret = secret
        self.logger = get_logger(__name__)

    @property
    def enabled(self) -> bool:
        return bool(self.secret)

    def verify(self, raw_body: bytes, signature_header: str | None) -> None:
        """
        Verify the signature header against the raw request body.

        Args:
            raw_body: Request body bytes exactly as received
            signature_header: Value of X-Hub-Signature-256, if any

        Raises:
            MissingSignatureError: Secret configured but no header supplied
            InvalidSignatureError: Header is malformed or does not match
        """
        if not self.secret:
            return

        if not signature_header:
            self.logger.warning("Webhook rejected: missing signature header")
            raise MissingSignatureError()

        provided = signature_header.strip()
        if provided.startswith(SIGNATURE_PREFIX):
            provided = provided[len(SIGNATURE_PREFIX) :]

        expected = compute_signature(raw_body, self.secret)

        try:
            provided_digest = bytes.fromhex(provided)
        except ValueError as e:
            self.logger.warning("Webhook rejected: signature is not a hex digest")
            raise InvalidSignatureError() from e

        expected_digest = bytes.fromhex(expected)
        if len(provided_digest) != len(expected_digest):
            self.logger.warning("Webhook rejected: signature length mismatch")
            raise InvalidSignatureError()

        if not hmac.compare_digest(expected_digest, provided_digest):
            self.logger.warning("Webhook rejected: signature mismatch")
            raise InvalidSignatureError()

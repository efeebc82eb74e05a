"""
Webhook subscription handshake.

When the webhook URL is registered, WhatsApp calls ``GET /webhook`` with
``hub.mode=subscribe``, a random ``hub.challenge`` and the verify token
configured in the app dashboard. Echoing the challenge confirms the
subscription.
"""

from wagateway.core.constants import SUBSCRIBE_MODE
from wagateway.core.exceptions import InvalidVerifyTokenError
from wagateway.core.logging.logger import get_logger

logger = get_logger(__name__)


def verify_subscription(
    mode: str | None,
    challenge: str,
    verify_token: str | None,
    expected_token: str,
) -> str:
    """
    Validate a subscription handshake.

    Plain equality is enough here: the token is a low-sensitivity, one-time
    shared value, not a cryptographic secret.

    Args:
        mode: ``hub.mode`` query value
        challenge: ``hub.challenge`` query value
        verify_token: ``hub.verify_token`` query value
        expected_token: Configured verify token

    Returns:
        The challenge, unchanged

    Raises:
        InvalidVerifyTokenError: Wrong mode or token
    """
    if mode != SUBSCRIBE_MODE:
        logger.warning(f"Webhook verification rejected: unexpected mode {mode!r}")
        raise InvalidVerifyTokenError()

    if verify_token != expected_token:
        logger.warning("Webhook verification rejected: invalid verify token")
        raise InvalidVerifyTokenError()

    logger.info("Webhook verified successfully")
    return challenge

"""
Request context management using contextvars for automatic propagation.

The webhook pipeline sets the business phone number and the WhatsApp user once
and every logger created through ``get_logger`` picks them up without manual
parameter passing.
"""

from contextvars import ContextVar, Token

_phone_context: ContextVar[str | None] = ContextVar(
    "phone_number_id", default=None
)  # Business number that received the event
_user_context: ContextVar[str | None] = ContextVar(
    "user_id", default=None
)  # WhatsApp id of the sender / recipient


def set_request_context(
    phone_number_id: str | None = None,
    user_id: str | None = None,
) -> None:
    """
    Set the request context for the current async context.

    Args:
        phone_number_id: Business phone number id from the webhook metadata
        user_id: WhatsApp id (wa_id) of the user the event concerns
    """
    if phone_number_id is not None:
        _phone_context.set(phone_number_id)
    if user_id is not None:
        _user_context.set(user_id)


def bind_user_context(user_id: str | None) -> Token:
    """Set the user context and return the token needed to restore it."""
    return _user_context.set(user_id)


def reset_user_context(token: Token) -> None:
    """Restore the user context captured by ``bind_user_context``."""
    _user_context.reset(token)


def get_current_phone_context() -> str | None:
    """Current business phone number id, or None if not set."""
    return _phone_context.get()


def get_current_user_context() -> str | None:
    """Current user id, or None if not set."""
    return _user_context.get()


def get_context_info() -> dict[str, str | None]:
    """Current context for debugging."""
    return {
        "phone_number_id": get_current_phone_context(),
        "user_id": get_current_user_context(),
    }

"""
Settings for the wagateway service.

Environment variable configuration for the WhatsApp Cloud API gateway. A single
immutable Settings instance is built at startup and injected into every
component through ``app.state.settings``.
"""

import os
import re
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

from wagateway.core.constants import DEFAULT_AUTO_REPLY_TEXT
from wagateway.core.exceptions import ConfigurationError

_SHA256_HEX = re.compile(r"^[a-fA-F0-9]{64}$")
_FALSE_VALUES = {"false", "0", "no", "off"}
_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
_VALID_ENVIRONMENTS = ("DEV", "PROD")


def _require(env: dict[str, str], key: str) -> str:
    value = env.get(key)
    if not value:
        raise ConfigurationError(f"Missing required env var: {key}")
    return value


def _parse_flag(raw: str | None, default: bool = True) -> bool:
    """Parse a boolean flag; anything but an explicit 'off' value is true."""
    if raw is None:
        return default
    return raw.strip().lower() not in _FALSE_VALUES


def parse_api_key_hashes(raw: str) -> tuple[bytes, ...]:
    """
    Parse the comma separated allow-list of API key digests.

    Args:
        raw: Comma separated SHA-256 hex digests

    Returns:
        Tuple of 32-byte digests

    Raises:
        ConfigurationError: If the list is empty or a value is not a SHA-256 hex digest
    """
    hashes = [value.strip() for value in raw.split(",") if value.strip()]
    if not hashes:
        raise ConfigurationError(
            "AUTH_API_KEY_HASHES must contain at least one value"
        )

    for value in hashes:
        if not _SHA256_HEX.match(value):
            raise ConfigurationError(
                f"Invalid API key hash: {value}. "
                "Expected a 64 character SHA-256 hex digest."
            )

    return tuple(bytes.fromhex(value) for value in hashes)


@dataclass(frozen=True)
class Settings:
    """Application settings with environment-based configuration."""

    # ================================================================
    # WhatsApp Configuration
    # ================================================================
    webhook_verify_token: str
    access_token: str
    phone_number_id: str
    api_key_hashes: tuple[bytes, ...] = field(repr=False)
    business_account_id: str | None = None
    app_secret: str | None = field(default=None, repr=False)
    validate_webhook_signature: bool = True
    api_version: str = "v17.0"
    graph_url: str = "https://graph.facebook.com"
    request_timeout: float = 30.0
    auto_reply_text: str = DEFAULT_AUTO_REPLY_TEXT

    # ================================================================
    # Server & Logging Configuration
    # ================================================================
    api_prefix: str = "/api"
    port: int = 3000
    log_level: str = "INFO"
    log_dir: str = "./logs"
    environment: str = "DEV"

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Loads a local ``.env`` file first when reading the real process
        environment.

        Args:
            env: Optional mapping used instead of ``os.environ``

        Returns:
            Validated Settings instance

        Raises:
            ConfigurationError: If a required variable is missing or malformed
        """
        if env is None:
            load_dotenv(".env")
            env = dict(os.environ)

        log_level = env.get("LOG_LEVEL", "INFO").upper()
        if log_level not in _VALID_LOG_LEVELS:
            raise ConfigurationError(f"LOG_LEVEL must be one of {list(_VALID_LOG_LEVELS)}")

        environment = env.get("ENVIRONMENT", "DEV").upper()
        if environment not in _VALID_ENVIRONMENTS:
            environment = "DEV"

        try:
            port = int(env.get("PORT", "3000"))
        except ValueError:
            port = 3000

        try:
            request_timeout = float(env.get("WHATSAPP_REQUEST_TIMEOUT", "30"))
        except ValueError as e:
            raise ConfigurationError("WHATSAPP_REQUEST_TIMEOUT must be a number") from e

        return cls(
            webhook_verify_token=_require(env, "WHATSAPP_WEBHOOK_VERIFY_TOKEN"),
            access_token=_require(env, "WHATSAPP_ACCESS_TOKEN"),
            phone_number_id=_require(env, "WHATSAPP_PHONE_NUMBER_ID"),
            api_key_hashes=parse_api_key_hashes(_require(env, "AUTH_API_KEY_HASHES")),
            business_account_id=env.get("WHATSAPP_BUSINESS_ACCOUNT_ID") or None,
            app_secret=env.get("WHATSAPP_APP_SECRET") or None,
            validate_webhook_signature=_parse_flag(
                env.get("WHATSAPP_VALIDATE_WEBHOOK_SIGNATURE")
            ),
            api_version=env.get("WHATSAPP_API_VERSION", "v17.0"),
            graph_url=env.get("WHATSAPP_GRAPH_URL", "https://graph.facebook.com"),
            request_timeout=request_timeout,
            auto_reply_text=env.get("AUTO_REPLY_TEXT") or DEFAULT_AUTO_REPLY_TEXT,
            api_prefix=env.get("API_PREFIX", "/api").rstrip("/"),
            port=port,
            log_level=log_level,
            log_dir=env.get("LOG_DIR", "./logs"),
            environment=environment,
        )

    @property
    def effective_app_secret(self) -> str | None:
        """Signature key, or None when webhook signature checking is disabled."""
        if not self.validate_webhook_signature:
            return None
        return self.app_secret

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "DEV"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "PROD"


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, built once from the environment."""
    return Settings.from_env()

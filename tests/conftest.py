"""
Pytest configuration and common fixtures for wagateway tests.
"""

from collections.abc import Callable
from typing import Any

import pytest
from factories import (
    AUTO_REPLY,
    BUSINESS_PHONE_ID,
    TEST_API_KEY,
    VERIFY_TOKEN,
    FakeGateway,
)

from wagateway.core.config.settings import Settings


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Factory for Settings with test defaults; keyword arguments override fields."""

    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "webhook_verify_token": VERIFY_TOKEN,
            "access_token": "test-access-token",
            "phone_number_id": BUSINESS_PHONE_ID,
            "api_key_hashes": (bytes.fromhex(TEST_API_KEY),),
            "business_account_id": "WABA_ID",
            "app_secret": None,
            "auto_reply_text": AUTO_REPLY,
            "environment": "PROD",
            "log_level": "DEBUG",
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()

"""
WhatsApp Cloud API HTTP client.

Key Design Decisions:
- Pure dependency injection: the aiohttp session is created once in the app
  lifespan and passed in
- Single responsibility for HTTP operations; payloads are built by the gateway
- Single error seam: every failure leaves this module as a GatewayError
"""

import asyncio
from typing import Any

import aiohttp

from wagateway.core.exceptions import GatewayError
from wagateway.core.logging.logger import get_logger
from wagateway.messaging.whatsapp.utils.error_helpers import (
    read_error_details,
    translate_transport_error,
)


class WhatsAppUrlBuilder:
    """Builds URLs for WhatsApp Cloud API endpoints."""

    def __init__(self, base_url: str, api_version: str, phone_number_id: str):
        """
        Args:
            base_url: Graph API base URL
            api_version: Graph API version (e.g. v17.0)
            phone_number_id: Business phone number id messages are sent from
        """
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.phone_number_id = phone_number_id

    def get_messages_url(self) -> str:
        """URL for sending messages and read receipts."""
        return f"{self.base_url}/{self.api_version}/{self.phone_number_id}/messages"

    def get_business_profile_url(self) -> str:
        return (
            f"{self.base_url}/{self.api_version}/"
            f"{self.phone_number_id}/whatsapp_business_profile"
        )

    def get_message_templates_url(self, business_account_id: str) -> str:
        return f"{self.base_url}/{self.api_version}/{business_account_id}/message_templates"


class WhatsAppClient:
    """WhatsApp Cloud API client bound to one business phone number."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        access_token: str,
        phone_number_id: str,
        api_version: str = "v17.0",
        base_url: str = "https://graph.facebook.com",
        timeout: float = 30.0,
        logger: Any | None = None,
    ):
        """
        Args:
            session: Persistent aiohttp session (managed by the FastAPI lifespan)
            access_token: WhatsApp Cloud API access token
            phone_number_id: Business phone number id
            api_version: Graph API version to use
            base_url: Graph API base URL
            timeout: Total timeout in seconds for a single provider call
            logger: Pre-configured logger instance
        """
        self.session = session
        self.access_token = access_token
        self.phone_number_id = phone_number_id
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.logger = logger or get_logger(__name__)
        self.url_builder = WhatsAppUrlBuilder(base_url, api_version, phone_number_id)

    def _get_headers(self, include_content_type: bool = True) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.access_token}"}
        if include_content_type:
            headers["Content-Type"] = "application/json"
        return headers

    async def _handle_response(
        self, response: aiohttp.ClientResponse, url: str
    ) -> dict[str, Any]:
        if response.status >= 400:
            details = await read_error_details(response)
            self.logger.error(
                f"WhatsApp API error {response.status} for {url}: {details}"
            )
            raise GatewayError(status_code=response.status, details=details)

        response_data = await response.json(content_type=None)
        self.logger.debug(f"Response: {response_data}")
        return response_data if response_data is not None else {}

    async def post_request(
        self, payload: dict[str, Any], custom_url: str | None = None
    ) -> dict[str, Any]:
        """Send a JSON POST request (defaults to the messages endpoint).

        Args:
            payload: JSON payload for the request
            custom_url: Optional URL overriding the messages endpoint

        Returns:
            JSON response from the WhatsApp API

        Raises:
            GatewayError: For provider errors and transport failures
        """
        url = custom_url or self.url_builder.get_messages_url()
        self.logger.debug(f"POST {url} payload: {payload}")

        try:
            async with self.session.post(
                url, headers=self._get_headers(), json=payload, timeout=self.timeout
            ) as response:
                return await self._handle_response(response, url)
        except GatewayError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as err:
            self.logger.error(f"Network error calling WhatsApp API ({url}): {err!r}")
            raise translate_transport_error(err) from err

    async def get_request(
        self, url: str, params: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Send a GET request.

        Args:
            url: Full endpoint URL
            params: Optional query parameters; None values are dropped

        Returns:
            JSON response from the WhatsApp API

        Raises:
            GatewayError: For provider errors and transport failures
        """
        query = {k: str(v) for k, v in (params or {}).items() if v is not None}
        self.logger.debug(f"GET {url} params: {query}")

        try:
            async with self.session.get(
                url,
                headers=self._get_headers(include_content_type=False),
                params=query,
                timeout=self.timeout,
            ) as response:
                return await self._handle_response(response, url)
        except GatewayError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as err:
            self.logger.error(f"Network error calling WhatsApp API ({url}): {err!r}")
            raise translate_transport_error(err) from err

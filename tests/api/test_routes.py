"""
HTTP-level tests: API key guard, webhook endpoints, messaging endpoints and
error mapping.
"""

import json
from unittest.mock import MagicMock

import aiohttp
import pytest
from factories import (
    APP_SECRET,
    AUTO_REPLY,
    TEST_API_KEY,
    VERIFY_TOKEN,
    messages_payload,
    sign,
    text_message,
)
from fastapi.testclient import TestClient

from wagateway.api.dependencies.whatsapp_dependencies import (
    get_gateway,
    get_whatsapp_client,
)
from wagateway.core.app import create_app
from wagateway.core.exceptions import GatewayError
from wagateway.messaging.whatsapp.client.whatsapp_client import WhatsAppClient

AUTH = {"X-API-Key": TEST_API_KEY}


@pytest.fixture
def app(settings, fake_gateway):
    app = create_app(settings)
    app.dependency_overrides[get_gateway] = lambda: fake_gateway
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


class TestHealth:
    def test_health_is_public(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert "uptime" in body
        assert "timestamp" in body


class TestApiKeyGuard:
    def test_missing_key_is_rejected(self, client, fake_gateway):
        response = client.post("/api/messages/text", json={"to": "628111", "body": "Hi"})

        assert response.status_code == 401
        assert response.json()["detail"] == "API key authentication failed"
        assert fake_gateway.calls == []

    def test_wrong_key_is_rejected(self, client):
        response = client.get(
            "/api/messages/profile", headers={"Authorization": "Bearer wrong"}
        )
        assert response.status_code == 401

    def test_bearer_key_is_accepted(self, client):
        response = client.get(
            "/api/messages/profile", headers={"Authorization": f"Bearer {TEST_API_KEY}"}
        )
        assert response.status_code == 200

    def test_x_api_key_is_accepted(self, client):
        assert client.get("/api/messages/profile", headers=AUTH).status_code == 200

    def test_webhook_is_public(self, client):
        response = client.get(
            "/api/webhook",
            params={
                "hub.mode": "subscribe",
                "hub.verify_token": VERIFY_TOKEN,
                "hub.challenge": "42",
            },
        )
        assert response.status_code == 200


class TestWebhookVerification:
    def test_challenge_is_echoed_as_plain_text(self, client):
        response = client.get(
            "/api/webhook",
            params={
                "hub.mode": "subscribe",
                "hub.verify_token": VERIFY_TOKEN,
                "hub.challenge": "1158201444",
            },
        )

        assert response.status_code == 200
        assert response.text == "1158201444"
        assert response.headers["content-type"].startswith("text/plain")

    def test_wrong_token_is_forbidden(self, client):
        response = client.get(
            "/api/webhook",
            params={"hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "1"},
        )

        assert response.status_code == 403
        assert VERIFY_TOKEN not in response.text

    def test_missing_parameters_are_rejected(self, client):
        response = client.get("/api/webhook", params={"hub.mode": "subscribe"})

        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"


class TestWebhookDelivery:
    def test_inbound_message_end_to_end(self, make_settings, fake_gateway):
        app = create_app(make_settings(app_secret=APP_SECRET))
        app.dependency_overrides[get_gateway] = lambda: fake_gateway
        client = TestClient(app)
        raw_body = json.dumps(
            messages_payload(text_message(sender="628111", message_id="wamid.A"))
        ).encode()

        response = client.post(
            "/api/webhook",
            content=raw_body,
            headers={"Content-Type": "application/json", "X-Hub-Signature-256": sign(raw_body)},
        )

        assert response.status_code == 200
        assert response.json() == {"status": "received"}
        assert fake_gateway.calls == [
            ("mark_read", {"message_id": "wamid.A"}),
            ("send_text", {"to": "628111", "body": AUTO_REPLY, "preview_url": True}),
        ]

    def test_invalid_signature_is_unauthorized(self, make_settings, fake_gateway):
        app = create_app(make_settings(app_secret=APP_SECRET))
        app.dependency_overrides[get_gateway] = lambda: fake_gateway
        raw_body = json.dumps(messages_payload(text_message())).encode()

        response = TestClient(app).post(
            "/api/webhook",
            content=raw_body,
            headers={"X-Hub-Signature-256": sign(raw_body, secret="wrong")},
        )

        assert response.status_code == 401
        assert fake_gateway.calls == []

    def test_missing_signature_is_unauthorized(self, make_settings, fake_gateway):
        app = create_app(make_settings(app_secret=APP_SECRET))
        app.dependency_overrides[get_gateway] = lambda: fake_gateway

        response = TestClient(app).post("/api/webhook", json=messages_payload(text_message()))

        assert response.status_code == 401

    def test_unsigned_delivery_accepted_without_secret(self, client, fake_gateway):
        response = client.post("/api/webhook", json=messages_payload(text_message()))

        assert response.status_code == 200
        assert fake_gateway.operations == ["mark_read", "send_text"]

    def test_gateway_failures_do_not_change_acknowledgement(self, client, fake_gateway):
        fake_gateway.failures["send_text"] = GatewayError(500, "connection reset")

        response = client.post("/api/webhook", json=messages_payload(text_message()))

        assert response.status_code == 200
        assert response.json() == {"status": "received"}

    def test_invalid_json_is_bad_request(self, client):
        response = client.post(
            "/api/webhook", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"

    def test_non_object_payload_is_bad_request(self, client):
        assert client.post("/api/webhook", json=[1, 2]).status_code == 400

    def test_non_object_change_value_does_not_reject_delivery(self, client, fake_gateway):
        payload = messages_payload(text_message(sender="628111", message_id="wamid.A"))
        payload["entry"][0]["changes"].insert(0, {"field": "statuses", "value": []})

        response = client.post("/api/webhook", json=payload)

        assert response.status_code == 200
        assert response.json() == {"status": "received"}
        assert fake_gateway.calls == [
            ("mark_read", {"message_id": "wamid.A"}),
            ("send_text", {"to": "628111", "body": AUTO_REPLY, "preview_url": True}),
        ]

    def test_empty_envelope_is_acknowledged(self, client, fake_gateway):
        response = client.post("/api/webhook", json={"object": "whatsapp_business_account"})

        assert response.status_code == 200
        assert fake_gateway.calls == []


class TestMessageEndpoints:
    def test_send_text(self, client, fake_gateway):
        response = client.post(
            "/api/messages/text",
            json={"to": "628111", "body": "Halo", "previewUrl": True},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json() == fake_gateway.response
        assert fake_gateway.calls == [
            ("send_text", {"to": "628111", "body": "Halo", "preview_url": True})
        ]

    def test_send_template(self, client, fake_gateway):
        response = client.post(
            "/api/messages/template",
            json={
                "to": "628111",
                "templateName": "reservasi",
                "language": "id",
                "components": [
                    {"type": "body", "parameters": [{"type": "text", "text": "Bunda"}]}
                ],
            },
            headers=AUTH,
        )

        assert response.status_code == 200
        operation, kwargs = fake_gateway.calls[0]
        assert operation == "send_template"
        assert kwargs["template_name"] == "reservasi"
        assert kwargs["language_code"] == "id"
        assert kwargs["components"][0].type == "body"

    def test_send_media_by_link(self, client, fake_gateway):
        response = client.post(
            "/api/messages/media",
            json={"to": "628111", "type": "image", "link": "https://x/img.png"},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert fake_gateway.calls[0][1]["source"].link == "https://x/img.png"

    @pytest.mark.parametrize(
        "body",
        [
            {"to": "628111", "type": "image"},
            {"to": "628111", "type": "image", "link": "https://x", "id": "MEDIA_1"},
        ],
    )
    def test_send_media_requires_exactly_one_source(self, client, fake_gateway, body):
        response = client.post("/api/messages/media", json=body, headers=AUTH)

        assert response.status_code == 400
        assert response.json()["detail"] == "Validation failed"
        assert fake_gateway.calls == []

    def test_send_interactive(self, client, fake_gateway):
        response = client.post(
            "/api/messages/interactive",
            json={"to": "628111", "interactive": {"type": "button"}},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert fake_gateway.calls == [
            (
                "send_interactive",
                {"to": "628111", "interactive": {"type": "button"}, "recipient_type": "individual"},
            )
        ]

    def test_send_custom(self, client, fake_gateway):
        payload = {"to": "628111", "type": "reaction", "reaction": {"emoji": "👍"}}

        response = client.post("/api/messages/custom", json={"payload": payload}, headers=AUTH)

        assert response.status_code == 200
        assert fake_gateway.calls == [("send_custom", {"payload": payload})]

    def test_mark_read_returns_no_content(self, client, fake_gateway):
        response = client.post(
            "/api/messages/mark-read", json={"messageId": "wamid.A"}, headers=AUTH
        )

        assert response.status_code == 204
        assert response.content == b""
        assert fake_gateway.calls == [("mark_read", {"message_id": "wamid.A"})]

    def test_list_templates_passes_query(self, client, fake_gateway):
        response = client.get(
            "/api/messages/templates", params={"limit": 5, "after": "CURSOR"}, headers=AUTH
        )

        assert response.status_code == 200
        assert fake_gateway.calls == [("list_templates", {"limit": 5, "after": "CURSOR"})]

    def test_list_templates_rejects_non_positive_limit(self, client, fake_gateway):
        response = client.get("/api/messages/templates", params={"limit": 0}, headers=AUTH)

        assert response.status_code == 400
        assert fake_gateway.calls == []

    def test_unknown_fields_are_rejected(self, client, fake_gateway):
        response = client.post(
            "/api/messages/text",
            json={"to": "628111", "body": "Halo", "unexpected": True},
            headers=AUTH,
        )

        assert response.status_code == 400
        assert fake_gateway.calls == []

    def test_provider_error_is_surfaced(self, client, fake_gateway):
        details = {"error": {"message": "Template name does not exist", "code": 132001}}
        fake_gateway.failures["send_text"] = GatewayError(404, details)

        response = client.post(
            "/api/messages/text", json={"to": "628111", "body": "Halo"}, headers=AUTH
        )

        assert response.status_code == 404
        assert response.json() == {"message": "WhatsApp API request failed", "details": details}


class TestConfigurationErrors:
    def test_list_templates_without_business_account(self, make_settings):
        session = MagicMock()
        app = create_app(make_settings(business_account_id=None))
        app.dependency_overrides[get_whatsapp_client] = lambda: WhatsAppClient(
            session=session, access_token="token", phone_number_id="BUSINESS_ID"
        )

        response = TestClient(app).get("/api/messages/templates", headers=AUTH)

        assert response.status_code == 400
        assert response.json()["type"] == "configuration_error"
        assert "WHATSAPP_BUSINESS_ACCOUNT_ID" in response.json()["detail"]
        session.get.assert_not_called()


class TestLifespan:
    def test_http_session_is_created_and_closed(self, settings):
        app = create_app(settings)

        with TestClient(app) as client:
            session = app.state.http_session
            assert isinstance(session, aiohttp.ClientSession)
            assert client.get("/api/health").json()["status"] == "ok"

        assert session.closed is True


class TestApiPrefix:
    def test_routes_follow_configured_prefix(self, make_settings):
        client = TestClient(create_app(make_settings(api_prefix="/v1")))

        assert client.get("/v1/health").status_code == 200
        assert client.get("/api/health", headers=AUTH).status_code == 404

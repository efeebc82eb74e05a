"""
Tests for webhook envelope parsing.
"""

import pytest
from factories import change_payload, messages_payload, text_message
from pydantic import ValidationError as PydanticValidationError

from wagateway.webhooks.whatsapp.models import (
    ChangeField,
    DeliveryStatus,
    InboundMessage,
    MessagesValue,
    StatusesValue,
    TemplateUpdateValue,
    WebhookChange,
    WebhookEnvelope,
)


class TestWebhookEnvelope:
    def test_entries_are_read_from_entry_key(self):
        envelope = WebhookEnvelope.model_validate(messages_payload(text_message()))

        assert envelope.object == "whatsapp_business_account"
        assert len(envelope.entries) == 1
        assert envelope.entries[0].changes[0].field == "messages"

    def test_missing_and_null_arrays_are_empty(self):
        assert WebhookEnvelope.model_validate({}).entries == []
        assert WebhookEnvelope.model_validate({"entry": None}).entries == []

        envelope = WebhookEnvelope.model_validate({"entry": [{"id": "1", "changes": None}]})
        assert envelope.entries[0].changes == []

    def test_unknown_keys_are_ignored(self):
        envelope = WebhookEnvelope.model_validate(
            {"object": "whatsapp_business_account", "entry": [], "new_provider_field": 1}
        )
        assert envelope.entries == []

    def test_envelope_is_immutable(self):
        envelope = WebhookEnvelope.model_validate({})
        with pytest.raises(PydanticValidationError):
            envelope.object = "changed"


class TestWebhookChange:
    def test_missing_field_is_unknown(self):
        change = WebhookChange.model_validate({"value": {}})

        assert change.field_name == "unknown"
        assert change.known_field is None
        assert change.parse_value() is None

    def test_unrecognized_field_parses_to_none(self):
        change = WebhookChange.model_validate({"field": "account_update", "value": {"x": 1}})
        assert change.parse_value() is None

    def test_messages_value(self):
        change = WebhookEnvelope.model_validate(
            messages_payload(text_message(sender="628111", body="Halo"))
        ).entries[0].changes[0]

        value = change.parse_value()

        assert change.known_field is ChangeField.MESSAGES
        assert isinstance(value, MessagesValue)
        assert value.business_phone_number_id == "BUSINESS_ID"
        assert value.contacts[0].profile_name == "Bunda"
        message = InboundMessage.model_validate(value.messages[0])
        assert message.from_ == "628111"
        assert message.text_body == "Halo"

    def test_reply_context(self):
        message = text_message()
        message["context"] = {"from": "BUSINESS_ID", "id": "wamid.PREV"}
        value = WebhookEnvelope.model_validate(messages_payload(message)).entries[0].changes[0]

        message = InboundMessage.model_validate(value.parse_value().messages[0])

        assert message.reply_to_id == "wamid.PREV"
        assert message.context.from_ == "BUSINESS_ID"

    def test_text_body_only_for_text_messages(self):
        image = {"from": "628111", "id": "wamid.IMG", "type": "image", "image": {"id": "MEDIA"}}
        parsed = (
            WebhookEnvelope.model_validate(messages_payload(image))
            .entries[0]
            .changes[0]
            .parse_value()
        )

        message = InboundMessage.model_validate(parsed.messages[0])

        assert message.text_body is None
        assert message.image.id == "MEDIA"

    def test_statuses_value(self):
        payload = change_payload(
            "statuses",
            {
                "statuses": [
                    {
                        "id": "wamid.OUT",
                        "status": "failed",
                        "recipient_id": "628111",
                        "errors": [{"code": 131047, "title": "Re-engagement message"}],
                    }
                ]
            },
        )
        value = WebhookEnvelope.model_validate(payload).entries[0].changes[0].parse_value()

        assert isinstance(value, StatusesValue)
        assert DeliveryStatus.model_validate(value.statuses[0]).errors[0].code == 131047

    @pytest.mark.parametrize(
        "field", ["message_template_status_update", "message_template_category_update"]
    )
    def test_template_update_value(self, field):
        payload = change_payload(
            field,
            {
                "message_template_id": 987,
                "message_template_name": "reservasi",
                "event": "REJECTED",
                "reason": "INVALID_FORMAT",
            },
        )
        value = WebhookEnvelope.model_validate(payload).entries[0].changes[0].parse_value()

        assert isinstance(value, TemplateUpdateValue)
        assert value.template_id == "987"
        assert value.template_name == "reservasi"
        assert value.event == "REJECTED"

    def test_malformed_value_raises(self):
        change = WebhookChange.model_validate(
            {"field": "messages", "value": {"messages": "not-a-list"}}
        )
        with pytest.raises(PydanticValidationError):
            change.parse_value()

    @pytest.mark.parametrize("value", [[], "x", 3])
    def test_non_object_value_is_kept_until_parsed(self, value):
        envelope = WebhookEnvelope.model_validate(change_payload("statuses", value))
        change = envelope.entries[0].changes[0]

        assert change.value == value
        with pytest.raises(PydanticValidationError):
            change.parse_value()

    def test_bad_message_does_not_fail_the_variant(self):
        bad = {"from": "628222", "id": "wamid.2", "location": {"latitude": "north"}}
        change = WebhookEnvelope.model_validate(
            messages_payload(text_message(message_id="wamid.1"), bad)
        ).entries[0].changes[0]

        value = change.parse_value()

        assert len(value.messages) == 2
        with pytest.raises(PydanticValidationError):
            InboundMessage.model_validate(value.messages[1])

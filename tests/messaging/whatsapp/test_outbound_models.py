"""
Tests for outbound request models.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from wagateway.messaging.whatsapp.models.outbound_models import (
    MarkReadRequest,
    MediaId,
    MediaLink,
    MediaType,
    SendInteractiveRequest,
    SendMediaRequest,
    SendTemplateRequest,
    SendTextRequest,
)


class TestSendMediaRequest:
    def test_link_source(self):
        request = SendMediaRequest.model_validate(
            {"to": "628111", "type": "image", "link": "https://x/img.png"}
        )

        assert request.type is MediaType.IMAGE
        assert request.source == MediaLink(link="https://x/img.png")

    def test_id_source(self):
        request = SendMediaRequest.model_validate(
            {"to": "628111", "type": "sticker", "id": "MEDIA_1"}
        )
        assert request.source == MediaId(id="MEDIA_1")

    def test_neither_source_is_rejected(self):
        with pytest.raises(PydanticValidationError):
            SendMediaRequest.model_validate({"to": "628111", "type": "image"})

    def test_both_sources_are_rejected(self):
        with pytest.raises(PydanticValidationError):
            SendMediaRequest.model_validate(
                {"to": "628111", "type": "image", "link": "https://x", "id": "MEDIA_1"}
            )

    def test_unknown_media_type_is_rejected(self):
        with pytest.raises(PydanticValidationError):
            SendMediaRequest.model_validate({"to": "628111", "type": "gif", "id": "M"})


class TestRequestModels:
    def test_camel_case_aliases(self):
        text = SendTextRequest.model_validate({"to": "628111", "body": "Hi", "previewUrl": True})
        template = SendTemplateRequest.model_validate(
            {"to": "628111", "templateName": "reservasi", "language": "id"}
        )
        mark = MarkReadRequest.model_validate({"messageId": "wamid.1"})

        assert text.preview_url is True
        assert template.template_name == "reservasi"
        assert mark.message_id == "wamid.1"

    def test_unknown_fields_are_rejected(self):
        with pytest.raises(PydanticValidationError):
            SendTextRequest.model_validate({"to": "628111", "body": "Hi", "extra": 1})

    def test_blank_body_is_rejected(self):
        with pytest.raises(PydanticValidationError):
            SendTextRequest.model_validate({"to": "628111", "body": "   "})

    def test_recipient_type_defaults_to_individual(self):
        request = SendInteractiveRequest.model_validate(
            {"to": "628111", "interactive": {"type": "list"}}
        )
        assert request.recipient_type == "individual"

    def test_invalid_template_component_type(self):
        with pytest.raises(PydanticValidationError):
            SendTemplateRequest.model_validate(
                {
                    "to": "628111",
                    "templateName": "reservasi",
                    "language": "id",
                    "components": [{"type": "sidebar"}],
                }
            )

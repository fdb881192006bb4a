"""
Unit tests for RCS Formatter data models
"""

import pytest

from rcs_formatter.exceptions import ValidationException
from rcs_formatter.models.rcs_models import (
    Action, ActionType, CardOrientation, CarouselCard, ComplianceIssue, FormatType,
    ImageInfo, IssueCategory, IssueSeverity, MediaHeight, MessageFormat
)


class TestFormatType:
    """Test format type parsing"""

    @pytest.mark.parametrize("value", ["rich_card", "richCard", "rich-card", FormatType.RICH_CARD])
    def test_rich_card_aliases(self, value):
        assert FormatType.parse(value) == FormatType.RICH_CARD

    def test_unknown_format_type(self):
        with pytest.raises(ValidationException, match="Unknown format type"):
            FormatType.parse("banner")


class TestAction:
    """Test Action construction"""

    def test_from_dict_with_value_key(self):
        action = Action.from_dict({"text": "Open", "type": "url", "value": "https://example.com"})

        assert action.type == ActionType.URL
        assert action.payload == "https://example.com"

    def test_payload_defaults_to_empty(self):
        action = Action.from_dict({"text": "Hi", "type": "text"})
        assert action.payload == ""

    def test_invalid_type(self):
        with pytest.raises(ValidationException):
            Action.from_dict({"text": "Hi", "type": "sms"})

    def test_missing_type(self):
        with pytest.raises(ValidationException, match="Action type is required"):
            Action.from_dict({"text": "Hi"})

    def test_non_string_text(self):
        with pytest.raises(ValidationException, match="text must be a string"):
            Action.from_dict({"text": 7, "type": "text"})

    def test_immutable(self):
        action = Action("Hi", ActionType.TEXT)
        with pytest.raises(AttributeError):
            action.text = "Bye"


class TestMessageFormat:
    """Test MessageFormat parsing from persisted records"""

    def test_from_record_with_json_strings(self, format_record):
        message_format = MessageFormat.from_dict(format_record)

        assert message_format.format_type == FormatType.CAROUSEL
        assert message_format.image_urls == (
            "https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"
        )
        assert message_format.actions == (
            Action("Book a table", ActionType.URL, "https://example.com/book"),
        )
        assert message_format.orientation == CardOrientation.VERTICAL
        assert message_format.media_height == MediaHeight.MEDIUM

    def test_from_snake_case_dict(self):
        message_format = MessageFormat.from_dict({
            "format_type": "richCard",
            "title": "Hello",
            "image_urls": ["https://cdn.example.com/a.jpg"],
            "actions": [],
        })

        assert message_format.format_type == FormatType.RICH_CARD
        assert message_format.image_urls == ("https://cdn.example.com/a.jpg",)
        assert message_format.orientation is None

    def test_missing_format_type(self):
        with pytest.raises(ValidationException, match="Format type is required"):
            MessageFormat.from_dict({"title": "Hello"})

    def test_malformed_json_array(self):
        with pytest.raises(ValidationException, match="not a valid JSON array"):
            MessageFormat.from_dict({"formatType": "carousel", "imageUrls": "[broken"})

    def test_non_array_actions(self):
        with pytest.raises(ValidationException, match="must be an array"):
            MessageFormat.from_dict({"formatType": "carousel", "actions": '{"text": "x"}'})

    def test_invalid_media_height(self):
        with pytest.raises(ValidationException):
            MessageFormat.from_dict({"formatType": "rich_card", "mediaHeight": "huge"})

    @pytest.mark.parametrize("field,value", [
        ("title", 12345),
        ("description", {"text": "nested"}),
    ])
    def test_non_string_text_fields(self, format_record, field, value):
        format_record[field] = value

        with pytest.raises(ValidationException, match=f"{field} must be a string") as exc_info:
            MessageFormat.from_dict(format_record)

        assert exc_info.value.field == field

    def test_to_dict_uses_camel_case(self, format_record):
        data = MessageFormat.from_dict(format_record).to_dict()

        assert data["formatType"] == "carousel"
        assert data["imageUrls"][0] == "https://cdn.example.com/a.jpg"
        assert data["actions"][0] == {
            "text": "Book a table", "type": "url", "payload": "https://example.com/book"
        }
        assert data["mediaHeight"] == "medium"


class TestOtherModels:
    """Test cards, issues and image info"""

    def test_carousel_card_from_dict(self):
        card = CarouselCard.from_dict({
            "id": 3,
            "title": "Deal",
            "imageUrl": "https://cdn.example.com/x.jpg",
            "actions": [{"text": "Go", "type": "url", "payload": "https://example.com"}],
        })

        assert card.id == "3"
        assert card.description == ""
        assert card.actions[0].type == ActionType.URL

    def test_carousel_card_rejects_non_string_fields(self):
        with pytest.raises(ValidationException, match="title must be a string"):
            CarouselCard.from_dict({"id": "1", "title": 3})
        with pytest.raises(ValidationException, match="imageUrl must be a string"):
            CarouselCard.from_dict({"id": "1", "imageUrl": ["a.jpg"]})

    def test_issue_to_dict(self):
        issue = ComplianceIssue(IssueSeverity.ERROR, IssueCategory.CONTENT, "Title is required",
                                field="title")
        assert issue.to_dict() == {
            "severity": "error",
            "category": "content",
            "message": "Title is required",
            "field": "title",
            "suggestion": None
        }

    def test_image_info_from_browser_file(self):
        info = ImageInfo.from_dict({"name": "a.png", "type": "image/png", "width": 10, "height": 5})
        assert info == ImageInfo("a.png", "image/png", 10, 5)

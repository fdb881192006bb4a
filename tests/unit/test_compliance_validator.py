"""
Unit tests for the RCS compliance validator
"""

import pytest

from rcs_formatter.config.centralized_config import RcsLimits
from rcs_formatter.models.rcs_models import (
    Action, ActionType, FormatType, IssueCategory, IssueSeverity, MessageFormat
)
from rcs_formatter.services.compliance_validator import (
    ComplianceValidator, is_valid_phone, is_valid_url, validate_rcs_format
)


def _by_severity(issues, severity):
    return [i for i in issues if i.severity == severity]


class TestUrlValidation:
    """Test the http(s) URL predicate"""

    @pytest.mark.parametrize("url", [
        "https://example.com/a",
        "http://example.com",
        "HTTPS://EXAMPLE.COM/path?q=1",
        "https://sub.example.co.uk:8443/x#frag",
    ])
    def test_valid_urls(self, url):
        assert is_valid_url(url) is True

    @pytest.mark.parametrize("url", [
        "ftp://example.com",
        "example.com",
        "mailto:someone@example.com",
        "https://",
        "http://exa mple.com",
        "https://example.com:99999/",
        "http://[::1",
        "",
        None,
    ])
    def test_invalid_urls(self, url):
        assert is_valid_url(url) is False


class TestPhoneValidation:
    """Test the phone number predicate"""

    def test_formatted_international_number(self):
        """11 digits after stripping punctuation"""
        assert is_valid_phone("+1 (555) 123-4567") is True

    def test_too_few_digits(self):
        assert is_valid_phone("555-1234") is False

    def test_digit_bounds(self):
        assert is_valid_phone("1234567890") is True
        assert is_valid_phone("123456789012345") is True
        assert is_valid_phone("1234567890123456") is False

    def test_rejects_letters_and_inner_plus(self):
        assert is_valid_phone("+1 555 CALL NOW") is False
        assert is_valid_phone("1+5551234567") is False
        assert is_valid_phone("") is False

    def test_uses_configured_limits(self):
        strict = RcsLimits(min_phone_digits=11, max_phone_digits=11)
        assert is_valid_phone("5551234567", strict) is False
        assert is_valid_phone("+15551234567", strict) is True


class TestRequiredFieldsAndLengths:
    """Test title, description and action count rules"""

    def test_compliant_format_has_no_issues(self, validator, make_format):
        assert validator.validate(make_format()) == []

    @pytest.mark.parametrize("title", [None, "", "   "])
    def test_missing_title(self, validator, make_format, title):
        issues = validator.validate(make_format(title=title))
        errors = _by_severity(issues, IssueSeverity.ERROR)

        assert len(errors) == 1
        assert errors[0].field == "title"
        assert errors[0].category == IssueCategory.CONTENT
        assert errors[0].message == "Title is required for RCS messages"

    def test_title_too_long_reports_one_content_error(self, validator, make_format):
        issues = validator.validate(make_format(title="x" * 201))
        title_errors = [i for i in issues
                        if i.severity == IssueSeverity.ERROR and i.field == "title"]

        assert len(title_errors) == 1
        assert title_errors[0].category == IssueCategory.CONTENT
        assert "201/200" in title_errors[0].message

    def test_title_at_limit_is_accepted(self, validator, make_format):
        assert validator.validate(make_format(title="x" * 200)) == []

    def test_description_too_long(self, validator, make_format):
        issues = validator.validate(make_format(description="d" * 2001))

        assert len(issues) == 1
        assert issues[0].field == "description"
        assert "2001/2000" in issues[0].message

    def test_actions_required(self, validator, make_format):
        issues = validator.validate(make_format(actions=()))

        assert len(issues) == 1
        assert issues[0].severity == IssueSeverity.ERROR
        assert issues[0].category == IssueCategory.ACTIONS
        assert issues[0].field == "actions"

    def test_too_many_actions(self, validator, make_format, url_action):
        issues = validator.validate(make_format(actions=(url_action,) * 5))

        assert len(issues) == 1
        assert issues[0].message == "Too many actions (5/4 maximum)"


class TestActionRules:
    """Test per-action checks"""

    def test_missing_button_text(self, validator, make_format, phone_action):
        blank = Action(text=" ", type=ActionType.URL, payload="https://example.com")
        issues = validator.validate(make_format(actions=(blank, phone_action)))

        assert [i.field for i in issues] == ["actions[0].text"]
        assert issues[0].message == "Action 1: Button text is required"

    def test_button_text_too_long(self, validator, make_format, url_action):
        long_text = Action(text="t" * 26, type=ActionType.URL, payload="https://example.com")
        issues = validator.validate(make_format(actions=(url_action, long_text)))

        assert len(issues) == 1
        assert issues[0].field == "actions[1].text"
        assert "26/25" in issues[0].message

    def test_ftp_url_is_rejected(self, validator, make_format, phone_action):
        ftp = Action(text="Download", type=ActionType.URL, payload="ftp://example.com")
        issues = validator.validate(make_format(actions=(ftp, phone_action)))

        assert len(issues) == 1
        assert issues[0].message == "Action 1: Invalid or missing URL"
        assert issues[0].field == "actions[0].payload"

    def test_missing_url_payload(self, validator, make_format, phone_action):
        empty = Action(text="Open", type=ActionType.URL, payload="")
        issues = validator.validate(make_format(actions=(empty, phone_action)))

        assert len(_by_severity(issues, IssueSeverity.ERROR)) == 1

    def test_short_phone_number(self, validator, make_format, url_action):
        short = Action(text="Call", type=ActionType.PHONE, payload="555-1234")
        issues = validator.validate(make_format(actions=(url_action, short)))

        assert len(issues) == 1
        assert issues[0].message == "Action 2: Invalid phone number format"

    def test_empty_postback_is_warning(self, validator, make_format, url_action):
        postback = Action(text="Yes please", type=ActionType.POSTBACK, payload="")
        issues = validator.validate(make_format(actions=(url_action, postback)))

        assert len(issues) == 1
        assert issues[0].severity == IssueSeverity.WARNING
        assert issues[0].category == IssueCategory.ACTIONS

    def test_text_and_calendar_actions_have_no_payload_rules(self, validator, make_format):
        actions = (
            Action(text="Hi", type=ActionType.TEXT),
            Action(text="Save date", type=ActionType.CALENDAR, payload="not a date"),
        )
        assert validator.validate(make_format(actions=actions)) == []


class TestImageAndCarouselRules:
    """Test image URL checks and carousel cardinality"""

    def test_invalid_image_url(self, validator, make_format):
        issues = validator.validate(make_format(image_urls=("not-a-url",)))

        assert len(issues) == 1
        assert issues[0].category == IssueCategory.IMAGES
        assert issues[0].field == "imageUrls[0]"

    def test_empty_carousel_only_warns(self, validator, make_format):
        issues = validator.validate(make_format(format_type=FormatType.CAROUSEL, image_urls=()))

        assert len(issues) == 1
        assert issues[0].severity == IssueSeverity.WARNING
        assert issues[0].category == IssueCategory.STRUCTURE
        assert "typically includes images" in issues[0].message

    def test_single_image_carousel_only_errors(self, validator, make_format):
        issues = validator.validate(make_format(
            format_type=FormatType.CAROUSEL,
            image_urls=("https://cdn.example.com/1.jpg",)
        ))

        assert len(issues) == 1
        assert issues[0].severity == IssueSeverity.ERROR
        assert issues[0].category == IssueCategory.STRUCTURE
        assert "requires at least 2 cards" in issues[0].message

    @pytest.mark.parametrize("count", [2, 5, 10])
    def test_carousel_within_bounds(self, validator, make_format, count):
        urls = tuple(f"https://cdn.example.com/{i}.jpg" for i in range(count))
        issues = validator.validate(make_format(format_type=FormatType.CAROUSEL, image_urls=urls))

        assert [i for i in issues if i.category == IssueCategory.STRUCTURE] == []

    def test_carousel_too_many_cards(self, validator, make_format):
        urls = tuple(f"https://cdn.example.com/{i}.jpg" for i in range(11))
        issues = validator.validate(make_format(format_type=FormatType.CAROUSEL, image_urls=urls))

        assert len(issues) == 1
        assert issues[0].message == "Too many carousel cards (11/10 maximum)"

    def test_rich_card_without_images_is_fine(self, validator, make_format):
        assert validator.validate(make_format(image_urls=())) == []

    def test_images_without_description_warn(self, validator, make_format):
        issues = validator.validate(make_format(description="  "))

        assert len(issues) == 1
        assert issues[0].severity == IssueSeverity.WARNING
        assert issues[0].message == "Images should have descriptive text for accessibility"


class TestBestPractices:
    """Test info-level hints"""

    def test_short_title_info(self, validator, make_format):
        issues = validator.validate(make_format(title="Sale"))

        assert len(issues) == 1
        assert issues[0].severity == IssueSeverity.INFO
        assert issues[0].category == IssueCategory.CONTENT

    def test_single_action_info(self, validator, make_format, url_action):
        issues = validator.validate(make_format(actions=(url_action,)))

        assert len(issues) == 1
        assert issues[0].severity == IssueSeverity.INFO
        assert issues[0].category == IssueCategory.ACTIONS


class TestOrderingAndDeterminism:
    """Test rule evaluation order and idempotence"""

    def test_all_rules_run_in_order(self, validator):
        message_format = MessageFormat(
            format_type=FormatType.CAROUSEL,
            title="Hey",
            description="",
            image_urls=("bad-url",),
            actions=(Action(text="", type=ActionType.PHONE, payload="123"),),
        )
        issues = validator.validate(message_format)

        assert [(i.severity, i.category) for i in issues] == [
            (IssueSeverity.ERROR, IssueCategory.ACTIONS),     # button text
            (IssueSeverity.ERROR, IssueCategory.ACTIONS),     # phone
            (IssueSeverity.ERROR, IssueCategory.IMAGES),      # image url
            (IssueSeverity.ERROR, IssueCategory.STRUCTURE),   # carousel < 2
            (IssueSeverity.WARNING, IssueCategory.CONTENT),   # accessibility
            (IssueSeverity.INFO, IssueCategory.CONTENT),      # short title
            (IssueSeverity.INFO, IssueCategory.ACTIONS),      # single action
        ]

    def test_validate_is_idempotent(self, validator, make_format):
        message_format = make_format(title="x" * 300, actions=())

        first = validator.validate(message_format)
        second = validator.validate(message_format)

        assert first == second
        assert [i.to_dict() for i in first] == [i.to_dict() for i in second]

    def test_module_level_helper_matches_validator(self, make_format):
        message_format = make_format(title="Hi")
        assert validate_rcs_format(message_format) == ComplianceValidator().validate(message_format)

    def test_report_groups_by_severity(self, validator, make_format):
        report = validator.report(make_format(title="Hi", actions=()))

        assert report.is_compliant is False
        assert len(report.errors) == 1
        assert len(report.infos) == 1
        assert report.to_dict()["counts"] == {"errors": 1, "warnings": 0, "info": 1}


class TestCustomLimits:
    """Test that limits flow through every rule"""

    def test_tighter_title_limit(self, make_format):
        validator = ComplianceValidator(RcsLimits(max_title_length=20))
        issues = validator.validate(make_format(title="A title that is too long"))

        assert issues[0].message == "Title exceeds maximum length (24/20 characters)"


class TestCardValidation:
    """Test the card-scoped rule set"""

    def test_valid_card(self, validator, make_card):
        assert validator.validate_card(make_card()) == []

    def test_card_skips_format_level_hints(self, validator, make_card):
        """Single action and short title hints only apply to whole formats"""
        assert validator.validate_card(make_card(title="Hi", description="")) == []

    def test_card_rules(self, validator, make_card):
        bad_actions = (
            Action(text="", type=ActionType.URL, payload="ftp://x.org"),
            Action(text="c" * 30, type=ActionType.PHONE, payload="12"),
        )
        issues = validator.validate_card(make_card(title="", actions=bad_actions))

        assert [i.field for i in issues] == [
            "title",
            "actions[0].text",
            "actions[0].payload",
            "actions[1].text",
            "actions[1].payload",
        ]

    def test_card_image_url(self, validator, make_card):
        issues = validator.validate_card(make_card(image_url="nope"))
        assert [i.category for i in issues] == [IssueCategory.IMAGES]

    def test_carousel_cards_prefix_and_count(self, validator, make_card):
        issues = validator.validate_carousel_cards([make_card(title="")])

        assert issues[0].field == "cards"
        assert issues[0].category == IssueCategory.STRUCTURE
        assert issues[1].message == "Card 1: Title is required for RCS messages"
        assert issues[1].field == "cards[0].title"

    def test_carousel_cards_max(self, validator, make_card):
        cards = [make_card(card_id=str(i)) for i in range(4)]
        issues = validator.validate_carousel_cards(cards, max_cards=3)

        assert len(issues) == 1
        assert issues[0].message == "Too many carousel cards (4/3 maximum)"

    def test_carousel_cards_zero_cap_is_respected(self, validator, make_card):
        cards = [make_card(card_id="1"), make_card(card_id="2")]
        issues = validator.validate_carousel_cards(cards, max_cards=0)

        assert len(issues) == 1
        assert issues[0].message == "Too many carousel cards (2/0 maximum)"

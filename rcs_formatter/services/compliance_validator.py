"""
RCS compliance validation for rich cards and carousels.

Every applicable rule runs on every call (no short-circuiting) and the
resulting issues keep a fixed order: required fields, length limits,
per-action checks, images, format-specific structure, then accessibility
and best-practice hints. The same rule engine serves top-level formats and
individual carousel cards; the scope decides which rule groups apply.
"""

import logging
import re
from enum import Enum
from typing import List, Optional, Sequence
from urllib.parse import urlsplit

from rcs_formatter.config.centralized_config import RcsLimits, DEFAULT_LIMITS
from rcs_formatter.models.rcs_models import (
    Action, ActionType, CarouselCard, ComplianceIssue, ComplianceReport,
    FormatType, IssueCategory, IssueSeverity, MessageFormat
)

logger = logging.getLogger(__name__)

_PHONE_PATTERN = re.compile(r'\+?[\d\s\-()]+', re.ASCII)
_NON_DIGITS = re.compile(r'\D', re.ASCII)


def is_valid_url(url: str) -> bool:
    """Absolute http(s) URL with a host; anything unparseable is invalid."""
    if not url or not isinstance(url, str):
        return False
    try:
        parsed = urlsplit(url.strip())
        # Accessing the port validates it
        parsed.port
    except ValueError:
        return False
    if parsed.scheme not in ('http', 'https'):
        return False
    return bool(parsed.hostname) and not any(c.isspace() for c in parsed.netloc)


def is_valid_phone(phone: str, limits: Optional[RcsLimits] = None) -> bool:
    """Optional leading +, then digits/spaces/hyphens/parentheses with 10-15 digits."""
    if not phone or not isinstance(phone, str):
        return False
    limits = limits or DEFAULT_LIMITS
    if not _PHONE_PATTERN.fullmatch(phone):
        return False
    digit_count = len(_NON_DIGITS.sub('', phone))
    return limits.min_phone_digits <= digit_count <= limits.max_phone_digits


class ValidationScope(Enum):
    """Which object the rule engine is looking at"""
    FORMAT = "format"
    CARD = "card"


class ComplianceValidator:
    """
    Validates message formats against the RCS specification limits.

    The validator holds no state besides its limits; calls are pure and
    may run concurrently.
    """

    def __init__(self, limits: Optional[RcsLimits] = None):
        self.limits = limits or DEFAULT_LIMITS

    def validate(self, message_format: MessageFormat) -> List[ComplianceIssue]:
        """
        Validate a top-level rich card or carousel format.

        Args:
            message_format: Format to check

        Returns:
            Issues in rule evaluation order
        """
        issues = self._run_rules(
            title=message_format.title,
            description=message_format.description,
            actions=message_format.actions,
            image_urls=message_format.image_urls,
            format_type=message_format.format_type,
            scope=ValidationScope.FORMAT
        )
        logger.debug(
            f"Validated {message_format.format_type.value} format: {len(issues)} issue(s)"
        )
        return issues

    def report(self, message_format: MessageFormat) -> ComplianceReport:
        """Validate and group the result by severity"""
        return ComplianceReport(issues=tuple(self.validate(message_format)))

    def validate_card(self, card: CarouselCard) -> List[ComplianceIssue]:
        """Validate a single carousel card with the card-scoped rule set"""
        image_urls = (card.image_url,) if card.image_url else ()
        return self._run_rules(
            title=card.title,
            description=card.description,
            actions=card.actions,
            image_urls=image_urls,
            format_type=FormatType.CAROUSEL,
            scope=ValidationScope.CARD
        )

    def validate_carousel_cards(self, cards: Sequence[CarouselCard],
                                max_cards: Optional[int] = None) -> List[ComplianceIssue]:
        """
        Validate a carousel given as individual cards.

        Card count issues come first, then each card's issues with the card
        number prefixed to the message and ``cards[i].`` to the field.
        """
        if max_cards is None:
            max_cards = self.limits.max_carousel_cards
        issues: List[ComplianceIssue] = []

        if len(cards) < self.limits.min_carousel_cards:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.ERROR,
                category=IssueCategory.STRUCTURE,
                message=f"Carousel requires at least {self.limits.min_carousel_cards} cards",
                field="cards",
                suggestion="Add more cards or switch to rich card format"
            ))
        if len(cards) > max_cards:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.ERROR,
                category=IssueCategory.STRUCTURE,
                message=f"Too many carousel cards ({len(cards)}/{max_cards} maximum)",
                field="cards",
                suggestion="Remove some cards or split into multiple carousels"
            ))

        for index, card in enumerate(cards):
            for issue in self.validate_card(card):
                issues.append(ComplianceIssue(
                    severity=issue.severity,
                    category=issue.category,
                    message=f"Card {index + 1}: {issue.message}",
                    field=f"cards[{index}].{issue.field}" if issue.field else f"cards[{index}]",
                    suggestion=issue.suggestion
                ))
        return issues

    def _run_rules(self, title: Optional[str], description: Optional[str],
                   actions: Sequence[Action], image_urls: Sequence[str],
                   format_type: FormatType, scope: ValidationScope) -> List[ComplianceIssue]:
        issues: List[ComplianceIssue] = []
        issues.extend(self._check_content(title, description))
        issues.extend(self._check_action_count(actions))
        for index, action in enumerate(actions):
            issues.extend(self._check_action(action, index))
        issues.extend(self._check_image_urls(image_urls))

        if scope == ValidationScope.FORMAT:
            issues.extend(self._check_carousel_structure(format_type, image_urls))
            issues.extend(self._check_best_practices(title, description, actions, image_urls))
        return issues

    def _check_content(self, title: Optional[str], description: Optional[str]) -> List[ComplianceIssue]:
        issues = []
        limits = self.limits

        if not title or not title.strip():
            issues.append(ComplianceIssue(
                severity=IssueSeverity.ERROR,
                category=IssueCategory.CONTENT,
                message="Title is required for RCS messages",
                field="title",
                suggestion="Add a descriptive title that summarizes your message content"
            ))

        if title and len(title) > limits.max_title_length:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.ERROR,
                category=IssueCategory.CONTENT,
                message=f"Title exceeds maximum length ({len(title)}/{limits.max_title_length} characters)",
                field="title",
                suggestion=f"Shorten your title to {limits.max_title_length} characters or less"
            ))

        if description and len(description) > limits.max_description_length:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.ERROR,
                category=IssueCategory.CONTENT,
                message=(f"Description exceeds maximum length "
                         f"({len(description)}/{limits.max_description_length} characters)"),
                field="description",
                suggestion=f"Shorten your description to {limits.max_description_length} characters or less"
            ))
        return issues

    def _check_action_count(self, actions: Sequence[Action]) -> List[ComplianceIssue]:
        issues = []
        if not actions:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.ERROR,
                category=IssueCategory.ACTIONS,
                message="At least one action button is required",
                field="actions",
                suggestion="Add buttons for users to interact with your message"
            ))

        if len(actions) > self.limits.max_actions:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.ERROR,
                category=IssueCategory.ACTIONS,
                message=f"Too many actions ({len(actions)}/{self.limits.max_actions} maximum)",
                field="actions",
                suggestion="Remove some actions or combine similar ones"
            ))
        return issues

    def _check_action(self, action: Action, index: int) -> List[ComplianceIssue]:
        issues = []
        number = index + 1
        max_text = self.limits.max_action_text_length

        if not action.text or not action.text.strip():
            issues.append(ComplianceIssue(
                severity=IssueSeverity.ERROR,
                category=IssueCategory.ACTIONS,
                message=f"Action {number}: Button text is required",
                field=f"actions[{index}].text",
                suggestion="Add descriptive text for this button"
            ))

        if action.text and len(action.text) > max_text:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.ERROR,
                category=IssueCategory.ACTIONS,
                message=f"Action {number}: Button text too long ({len(action.text)}/{max_text} characters)",
                field=f"actions[{index}].text",
                suggestion=f"Shorten button text to {max_text} characters or less"
            ))

        if action.type == ActionType.URL:
            if not is_valid_url(action.payload):
                issues.append(ComplianceIssue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.ACTIONS,
                    message=f"Action {number}: Invalid or missing URL",
                    field=f"actions[{index}].payload",
                    suggestion="Provide a valid HTTP or HTTPS URL"
                ))
        elif action.type == ActionType.PHONE:
            if not is_valid_phone(action.payload, self.limits):
                issues.append(ComplianceIssue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.ACTIONS,
                    message=f"Action {number}: Invalid phone number format",
                    field=f"actions[{index}].payload",
                    suggestion="Use international format with country code (e.g., +1234567890)"
                ))
        elif action.type == ActionType.POSTBACK:
            if not action.payload:
                issues.append(ComplianceIssue(
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.ACTIONS,
                    message=f"Action {number}: Postback payload is empty",
                    field=f"actions[{index}].payload",
                    suggestion="Add a payload to identify this button interaction"
                ))
        return issues

    def _check_image_urls(self, image_urls: Sequence[str]) -> List[ComplianceIssue]:
        issues = []
        for index, url in enumerate(image_urls):
            if not is_valid_url(url):
                issues.append(ComplianceIssue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.IMAGES,
                    message=f"Image {index + 1}: Invalid URL format",
                    field=f"imageUrls[{index}]",
                    suggestion="Provide a valid HTTP or HTTPS URL for the image"
                ))
        return issues

    def _check_carousel_structure(self, format_type: FormatType,
                                  image_urls: Sequence[str]) -> List[ComplianceIssue]:
        issues = []
        if format_type != FormatType.CAROUSEL:
            return issues

        # Cardinality only applies once images exist; an empty carousel gets the nudge below
        if image_urls:
            if len(image_urls) < self.limits.min_carousel_cards:
                issues.append(ComplianceIssue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.STRUCTURE,
                    message=f"Carousel requires at least {self.limits.min_carousel_cards} cards",
                    field="imageUrls",
                    suggestion="Add more cards or switch to rich card format"
                ))

            if len(image_urls) > self.limits.max_carousel_cards:
                issues.append(ComplianceIssue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.STRUCTURE,
                    message=(f"Too many carousel cards "
                             f"({len(image_urls)}/{self.limits.max_carousel_cards} maximum)"),
                    field="imageUrls",
                    suggestion="Remove some cards or split into multiple carousels"
                ))
        else:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.WARNING,
                category=IssueCategory.STRUCTURE,
                message="Carousel format typically includes images for each card",
                suggestion="Consider adding images to make your carousel more engaging"
            ))
        return issues

    def _check_best_practices(self, title: Optional[str], description: Optional[str],
                              actions: Sequence[Action],
                              image_urls: Sequence[str]) -> List[ComplianceIssue]:
        issues = []

        if image_urls and (not description or not description.strip()):
            issues.append(ComplianceIssue(
                severity=IssueSeverity.WARNING,
                category=IssueCategory.CONTENT,
                message="Images should have descriptive text for accessibility",
                suggestion="Add a description that explains what the image shows"
            ))

        if title and len(title) < self.limits.short_title_length:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.INFO,
                category=IssueCategory.CONTENT,
                message="Short titles may not provide enough context",
                suggestion="Consider adding more descriptive text to help users understand the message"
            ))

        if len(actions) == 1:
            issues.append(ComplianceIssue(
                severity=IssueSeverity.INFO,
                category=IssueCategory.ACTIONS,
                message="Single action button - consider adding more interaction options",
                suggestion="Multiple buttons can improve user engagement"
            ))
        return issues


def validate_rcs_format(message_format: MessageFormat,
                        limits: Optional[RcsLimits] = None) -> List[ComplianceIssue]:
    """Validate a format with a one-off validator"""
    return ComplianceValidator(limits).validate(message_format)

"""
Pytest configuration and shared fixtures for RCS Formatter tests
"""
import io
import os

import pytest
from PIL import Image

# Rate limiting would throttle the integration suite
os.environ.setdefault("RCS_RATE_LIMIT__ENABLED", "false")
os.environ.setdefault("RCS_APPLICATION__ENVIRONMENT", "testing")

from rcs_formatter.config.centralized_config import RcsLimits, reset_config
from rcs_formatter.models.rcs_models import Action, ActionType, CarouselCard, FormatType, MessageFormat
from rcs_formatter.services.compliance_validator import ComplianceValidator


@pytest.fixture(autouse=True)
def fresh_config():
    """Rebuild the cached configuration for every test"""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def limits():
    return RcsLimits()


@pytest.fixture
def validator(limits):
    return ComplianceValidator(limits)


@pytest.fixture
def url_action():
    return Action(text="Visit website", type=ActionType.URL, payload="https://example.com/shop")


@pytest.fixture
def phone_action():
    return Action(text="Call us", type=ActionType.PHONE, payload="+1 (555) 123-4567")


@pytest.fixture
def make_format(url_action, phone_action):
    """Factory for a compliant format with selected fields overridden"""
    def _make(**overrides):
        fields = {
            "format_type": FormatType.RICH_CARD,
            "title": "Summer collection is here",
            "description": "Browse the new arrivals and get free shipping this week.",
            "image_urls": ("https://cdn.example.com/summer.jpg",),
            "actions": (url_action, phone_action),
        }
        fields.update(overrides)
        return MessageFormat(**fields)
    return _make


@pytest.fixture
def make_card(url_action):
    def _make(card_id="card-1", **overrides):
        fields = {
            "id": card_id,
            "title": "Weekend deal",
            "description": "Two for one on all pastries.",
            "image_url": "https://cdn.example.com/pastry.jpg",
            "actions": (url_action,),
        }
        fields.update(overrides)
        return CarouselCard(**fields)
    return _make


@pytest.fixture
def format_record():
    """A format as stored by the persistence layer"""
    return {
        "id": 7,
        "formatType": "carousel",
        "title": "Spring menu highlights",
        "description": "Three new dishes for the season.",
        "imageUrls": '["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]',
        "actions": '[{"text": "Book a table", "type": "url", "payload": "https://example.com/book"}]',
        "cardOrientation": "vertical",
        "mediaHeight": "medium",
    }


@pytest.fixture
def png_bytes():
    """In-memory 1000x500 PNG"""
    buffer = io.BytesIO()
    Image.new("RGB", (1000, 500), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()

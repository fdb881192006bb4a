"""
RCS JSON templates for the RBM API helper

Builds ``rbmApiHelper.sendRichCard`` and ``rbmApiHelper.sendCarousel``
payloads from composed formats. Every payload is checked against a JSON
schema before it is returned.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import jsonschema

from rcs_formatter.config.centralized_config import TemplateDefaults, get_config
from rcs_formatter.exceptions import TemplateGenerationException
from rcs_formatter.models.rcs_models import Action, ActionType, FormatType, MessageFormat
from rcs_formatter.utils.logger import Logger

logger = logging.getLogger(__name__)

_SUGGESTION_SCHEMA = {
    "type": "object",
    "oneOf": [
        {
            "required": ["reply"],
            "properties": {
                "reply": {
                    "type": "object",
                    "required": ["text", "postbackData"],
                    "properties": {"text": {"type": "string"}, "postbackData": {"type": "string"}}
                }
            }
        },
        {
            "required": ["action"],
            "properties": {
                "action": {
                    "type": "object",
                    "required": ["text", "postbackData"],
                    "properties": {
                        "text": {"type": "string"},
                        "postbackData": {"type": "string"},
                        "openUrlAction": {"type": "object", "required": ["url"]},
                        "dialAction": {"type": "object", "required": ["phoneNumber"]},
                        "createCalendarEventAction": {
                            "type": "object", "required": ["startTime", "endTime", "title"]
                        }
                    }
                }
            }
        }
    ]
}

RICH_CARD_SCHEMA = {
    "type": "object",
    "required": ["rbmApiHelper"],
    "properties": {
        "rbmApiHelper": {
            "type": "object",
            "required": ["sendRichCard"],
            "properties": {
                "sendRichCard": {
                    "type": "object",
                    "required": ["params"],
                    "properties": {
                        "params": {
                            "type": "object",
                            "required": [
                                "messageText", "messageDescription", "msisdn", "suggestions",
                                "imageUrl", "height", "orientation", "brandDisplayName", "isVerified"
                            ],
                            "properties": {
                                "messageText": {"type": "string"},
                                "messageDescription": {"type": "string"},
                                "msisdn": {"type": "string"},
                                "suggestions": {"type": "array", "items": _SUGGESTION_SCHEMA},
                                "imageUrl": {"type": "string"},
                                "height": {"enum": ["SHORT", "MEDIUM", "TALL"]},
                                "orientation": {"enum": ["VERTICAL", "HORIZONTAL"]},
                                "brandDisplayName": {"type": "string"},
                                "isVerified": {"type": "boolean"}
                            }
                        }
                    }
                }
            }
        }
    }
}

CAROUSEL_SCHEMA = {
    "type": "object",
    "required": ["rbmApiHelper"],
    "properties": {
        "rbmApiHelper": {
            "type": "object",
            "required": ["sendCarousel"],
            "properties": {
                "sendCarousel": {
                    "type": "object",
                    "required": ["params"],
                    "properties": {
                        "params": {
                            "type": "object",
                            "required": [
                                "msisdn", "cardWidth", "cardContents", "suggestions",
                                "brandDisplayName", "isVerified"
                            ],
                            "properties": {
                                "msisdn": {"type": "string"},
                                "cardWidth": {"enum": ["SMALL", "MEDIUM"]},
                                "cardContents": {
                                    "type": "array",
                                    "items": {
                                        "type": "object",
                                        "required": ["title", "description", "media", "suggestions"],
                                        "properties": {
                                            "media": {
                                                "type": "object",
                                                "required": ["height", "contentInfo"],
                                                "properties": {
                                                    "height": {"enum": ["SHORT", "MEDIUM", "TALL"]},
                                                    "contentInfo": {
                                                        "type": "object",
                                                        "required": ["fileUrl", "forceRefresh"]
                                                    }
                                                }
                                            },
                                            "suggestions": {"type": "array", "items": _SUGGESTION_SCHEMA}
                                        }
                                    }
                                },
                                "suggestions": {"type": "array", "items": _SUGGESTION_SCHEMA},
                                "brandDisplayName": {"type": "string"},
                                "isVerified": {"type": "boolean"}
                            }
                        }
                    }
                }
            }
        }
    }
}


def build_suggestion(action: Action) -> Dict[str, Any]:
    """Convert one action into an RBM suggestion (reply or action)"""
    if action.type == ActionType.URL:
        return {
            "action": {
                "text": action.text,
                "postbackData": f"action_url_{action.text}",
                "openUrlAction": {"url": action.payload}
            }
        }
    if action.type == ActionType.PHONE:
        return {
            "action": {
                "text": action.text,
                "postbackData": f"action_phone_{action.text}",
                "dialAction": {"phoneNumber": action.payload}
            }
        }
    if action.type == ActionType.CALENDAR:
        return {
            "action": {
                "text": action.text,
                "postbackData": f"action_calendar_{action.text}",
                "createCalendarEventAction": {
                    "startTime": action.payload,
                    "endTime": action.payload,
                    "title": f"Event: {action.text}"
                }
            }
        }
    if action.type == ActionType.POSTBACK and action.payload:
        return {"reply": {"text": action.text, "postbackData": action.payload}}
    return {"reply": {"text": action.text, "postbackData": f"reply_{action.text}"}}


def build_suggestions(actions: Sequence[Action]) -> List[Dict[str, Any]]:
    return [build_suggestion(action) for action in actions]


def _check_schema(payload: Dict[str, Any], schema: Dict[str, Any], template_type: str) -> None:
    try:
        jsonschema.validate(payload, schema)
    except jsonschema.ValidationError as e:
        raise TemplateGenerationException(
            f"Generated {template_type} payload failed schema validation: {e.message}",
            template_type=template_type,
            original_exception=e
        )


def generate_rich_card_json(title: str,
                            description: str,
                            image_url: str,
                            suggestions: Sequence[Action] = (),
                            media_height: Optional[str] = None,
                            orientation: Optional[str] = None,
                            brand_display_name: Optional[str] = None,
                            verified: Optional[bool] = None,
                            msisdn: Optional[str] = None,
                            defaults: Optional[TemplateDefaults] = None) -> Dict[str, Any]:
    """
    Generate a rich card payload for the RBM API helper.

    Unset arguments fall back to the configured template defaults.

    Raises:
        TemplateGenerationException: the payload does not match the schema
    """
    defaults = defaults or get_config().template

    payload = {
        "rbmApiHelper": {
            "sendRichCard": {
                "params": {
                    "messageText": title or "",
                    "messageDescription": description or "",
                    "msisdn": msisdn or defaults.msisdn,
                    "suggestions": build_suggestions(suggestions),
                    "imageUrl": image_url or "",
                    "height": (media_height or defaults.media_height).upper(),
                    "orientation": (orientation or defaults.orientation).upper(),
                    "brandDisplayName": (brand_display_name if brand_display_name is not None
                                         else defaults.brand_display_name),
                    "isVerified": verified if verified is not None else defaults.verified
                }
            }
        }
    }

    _check_schema(payload, RICH_CARD_SCHEMA, "rich_card")
    return payload


def generate_carousel_json(cards: Sequence[Dict[str, Any]],
                           suggestions: Sequence[Action] = (),
                           card_width: Optional[str] = None,
                           brand_display_name: Optional[str] = None,
                           verified: Optional[bool] = None,
                           msisdn: Optional[str] = None,
                           defaults: Optional[TemplateDefaults] = None) -> Dict[str, Any]:
    """
    Generate a carousel payload for the RBM API helper.

    Args:
        cards: Dicts with ``title``, ``description``, ``imageUrl`` and
            optional ``mediaHeight`` and ``suggestions`` (actions)
        suggestions: Carousel-level actions

    Raises:
        TemplateGenerationException: the payload does not match the schema
    """
    defaults = defaults or get_config().template

    card_contents = []
    for card in cards:
        card_contents.append({
            "title": card.get("title") or "",
            "description": card.get("description") or "",
            "media": {
                "height": (card.get("mediaHeight") or defaults.media_height).upper(),
                "contentInfo": {
                    "fileUrl": card.get("imageUrl") or "",
                    "forceRefresh": True
                }
            },
            "suggestions": build_suggestions(card.get("suggestions") or ())
        })

    payload = {
        "rbmApiHelper": {
            "sendCarousel": {
                "params": {
                    "msisdn": msisdn or defaults.msisdn,
                    "cardWidth": (card_width or defaults.card_width).upper(),
                    "cardContents": card_contents,
                    "suggestions": build_suggestions(suggestions),
                    "brandDisplayName": (brand_display_name if brand_display_name is not None
                                         else defaults.brand_display_name),
                    "isVerified": verified if verified is not None else defaults.verified
                }
            }
        }
    }

    _check_schema(payload, CAROUSEL_SCHEMA, "carousel")
    return payload


def generate_from_format(message_format: MessageFormat,
                         defaults: Optional[TemplateDefaults] = None,
                         msisdn: Optional[str] = None) -> Dict[str, Any]:
    """
    Generate the RBM payload matching a composed format.

    A rich card uses the first image. A carousel gets one card per image,
    titles numbered from 1 and the description on the first card only; the
    format's actions are attached to every card.
    """
    media_height = message_format.media_height.value if message_format.media_height else None
    try:
        if message_format.format_type == FormatType.RICH_CARD:
            payload = generate_rich_card_json(
                title=message_format.title or "",
                description=message_format.description or "",
                image_url=message_format.image_urls[0] if message_format.image_urls else "",
                suggestions=message_format.actions,
                media_height=media_height,
                orientation=message_format.orientation.value if message_format.orientation else None,
                msisdn=msisdn,
                defaults=defaults
            )
        else:
            cards = [
                {
                    "title": f"{message_format.title or 'Card'} {index + 1}",
                    "description": (message_format.description or "") if index == 0 else "",
                    "imageUrl": image_url,
                    "mediaHeight": media_height,
                    "suggestions": message_format.actions
                }
                for index, image_url in enumerate(message_format.image_urls)
            ]
            payload = generate_carousel_json(cards=cards, msisdn=msisdn, defaults=defaults)
    except TemplateGenerationException:
        Logger.log_export_event(message_format.format_type.value, len(message_format.actions), False)
        raise

    Logger.log_export_event(message_format.format_type.value, len(message_format.actions), True)
    return payload

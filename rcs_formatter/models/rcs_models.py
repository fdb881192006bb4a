"""
Data models for the RCS Formatter

This module defines the value types consumed and produced by the compliance
validator, the platform validation engine and the media size converter.
Records coming from the persistence layer (camelCase keys, JSON-encoded
arrays) are accepted as-is through the ``from_dict`` constructors.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Tuple
from enum import Enum
import json
import logging

from rcs_formatter.exceptions import ValidationException

logger = logging.getLogger(__name__)


class FormatType(Enum):
    """Message format enumeration"""
    RICH_CARD = "rich_card"
    CAROUSEL = "carousel"

    @classmethod
    def parse(cls, value: Any) -> 'FormatType':
        """Parse a format type, accepting the persisted ``richCard`` alias"""
        if isinstance(value, cls):
            return value
        aliases = {"richCard": cls.RICH_CARD, "rich-card": cls.RICH_CARD}
        if value in aliases:
            return aliases[value]
        try:
            return cls(value)
        except ValueError:
            raise ValidationException(
                f"Unknown format type: {value}", field="formatType", value=value
            )


class CardOrientation(Enum):
    """Rich card orientation enumeration"""
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class MediaHeight(Enum):
    """Rich card media height enumeration"""
    SHORT = "short"
    MEDIUM = "medium"
    TALL = "tall"


class ActionType(Enum):
    """Suggested action / reply variants"""
    URL = "url"
    PHONE = "phone"
    POSTBACK = "postback"
    TEXT = "text"
    CALENDAR = "calendar"


class IssueSeverity(Enum):
    """Compliance issue severity"""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class IssueCategory(Enum):
    """Compliance issue category"""
    STRUCTURE = "structure"
    CONTENT = "content"
    ACTIONS = "actions"
    IMAGES = "images"
    FORMATTING = "formatting"


class Platform(Enum):
    """Target platform of a platform-specific warning"""
    IOS = "ios"
    ANDROID = "android"
    BOTH = "both"


def _parse_optional_enum(enum_cls, value: Any, field_name: str):
    if value is None or value == "":
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationException(
            f"Invalid value for {field_name}: {value}", field=field_name, value=value
        )


def _decode_json_array(value: Any, field_name: str) -> List[Any]:
    """Decode a persisted array that may arrive JSON-encoded"""
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value) if value.strip() else []
        except json.JSONDecodeError as e:
            raise ValidationException(
                f"{field_name} is not a valid JSON array: {str(e)}",
                field=field_name, value=value
            )
    if not isinstance(value, (list, tuple)):
        raise ValidationException(f"{field_name} must be an array", field=field_name, value=value)
    return list(value)


def _first_present(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def _optional_text(value: Any, field_name: str) -> Optional[str]:
    """Text fields are strings or missing; anything else is a malformed record"""
    if value is None or isinstance(value, str):
        return value
    raise ValidationException(
        f"{field_name} must be a string", field=field_name, value=value
    )


@dataclass(frozen=True)
class Action:
    """A suggested action button; ``payload`` meaning depends on ``type``"""
    text: str
    type: ActionType
    payload: str = ""

    def __post_init__(self):
        if not isinstance(self.type, ActionType):
            object.__setattr__(self, 'type', _parse_optional_enum(ActionType, self.type, 'type'))
        if self.type is None:
            raise ValidationException("Action type is required", field="type")
        if self.text is None:
            object.__setattr__(self, 'text', "")
        if self.payload is None:
            object.__setattr__(self, 'payload', "")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Action':
        """Create from a dictionary; the payload may be stored under ``value``"""
        if not isinstance(data, dict):
            raise ValidationException("Action must be an object", field="actions", value=data)
        return cls(
            text=_optional_text(data.get('text'), 'text') or "",
            type=data.get('type'),
            payload=_first_present(data, 'payload', 'value', default="") or ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "type": self.type.value, "payload": self.payload}


@dataclass(frozen=True)
class MessageFormat:
    """A composed rich card or carousel, as stored by the persistence layer"""
    format_type: FormatType
    title: Optional[str] = None
    description: Optional[str] = None
    image_urls: Tuple[str, ...] = ()
    actions: Tuple[Action, ...] = ()
    orientation: Optional[CardOrientation] = None
    media_height: Optional[MediaHeight] = None

    def __post_init__(self):
        object.__setattr__(self, 'format_type', FormatType.parse(self.format_type))
        object.__setattr__(self, 'image_urls', tuple(self.image_urls or ()))
        object.__setattr__(self, 'actions', tuple(
            a if isinstance(a, Action) else Action.from_dict(a) for a in (self.actions or ())
        ))
        object.__setattr__(self, 'orientation',
                           _parse_optional_enum(CardOrientation, self.orientation, 'orientation'))
        object.__setattr__(self, 'media_height',
                           _parse_optional_enum(MediaHeight, self.media_height, 'mediaHeight'))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MessageFormat':
        """Create from a persisted record or an API body"""
        if not isinstance(data, dict):
            raise ValidationException("Format must be an object", field="format", value=data)

        format_type = _first_present(data, 'formatType', 'format_type')
        if format_type is None:
            raise ValidationException("Format type is required", field="formatType")

        actions = _decode_json_array(data.get('actions'), 'actions')
        image_urls = _decode_json_array(_first_present(data, 'imageUrls', 'image_urls'), 'imageUrls')

        return cls(
            format_type=format_type,
            title=_optional_text(data.get('title'), 'title'),
            description=_optional_text(data.get('description'), 'description'),
            image_urls=tuple(str(url) for url in image_urls),
            actions=tuple(Action.from_dict(a) for a in actions),
            orientation=_first_present(data, 'orientation', 'cardOrientation', 'card_orientation'),
            media_height=_first_present(data, 'mediaHeight', 'media_height')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "formatType": self.format_type.value,
            "title": self.title,
            "description": self.description,
            "imageUrls": list(self.image_urls),
            "actions": [a.to_dict() for a in self.actions],
            "orientation": self.orientation.value if self.orientation else None,
            "mediaHeight": self.media_height.value if self.media_height else None
        }


@dataclass(frozen=True)
class CarouselCard:
    """A single card inside a carousel"""
    id: str
    title: str = ""
    description: str = ""
    image_url: Optional[str] = None
    actions: Tuple[Action, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'actions', tuple(
            a if isinstance(a, Action) else Action.from_dict(a) for a in (self.actions or ())
        ))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CarouselCard':
        if not isinstance(data, dict):
            raise ValidationException("Card must be an object", field="cards", value=data)
        return cls(
            id=str(data.get('id', "")),
            title=_optional_text(data.get('title'), 'title') or "",
            description=_optional_text(data.get('description'), 'description') or "",
            image_url=_optional_text(_first_present(data, 'imageUrl', 'image_url'), 'imageUrl'),
            actions=tuple(_decode_json_array(data.get('actions'), 'actions'))
        )


@dataclass(frozen=True)
class ComplianceIssue:
    """A single finding of the compliance validator"""
    severity: IssueSeverity
    category: IssueCategory
    message: str
    field: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "category": self.category.value,
            "message": self.message,
            "field": self.field,
            "suggestion": self.suggestion
        }


@dataclass(frozen=True)
class ComplianceReport:
    """Validation result grouped by severity"""
    issues: Tuple[ComplianceIssue, ...]

    @property
    def errors(self) -> List[ComplianceIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.ERROR]

    @property
    def warnings(self) -> List[ComplianceIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.WARNING]

    @property
    def infos(self) -> List[ComplianceIssue]:
        return [i for i in self.issues if i.severity == IssueSeverity.INFO]

    @property
    def is_compliant(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isCompliant": self.is_compliant,
            "counts": {
                "errors": len(self.errors),
                "warnings": len(self.warnings),
                "info": len(self.infos)
            },
            "issues": [i.to_dict() for i in self.issues]
        }


@dataclass(frozen=True)
class Dimensions:
    """Pixel dimensions, optionally marked as scaled down"""
    width: int
    height: int
    scaled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"width": self.width, "height": self.height, "scaled": self.scaled}


@dataclass(frozen=True)
class ImageInfo:
    """Image metadata used by the platform validation engine"""
    name: str
    mime_type: str = ""
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ImageInfo':
        if not isinstance(data, dict):
            raise ValidationException("Image must be an object", field="images", value=data)
        return cls(
            name=data.get('name') or "",
            mime_type=_first_present(data, 'type', 'mimeType', 'mime_type', default="") or "",
            width=data.get('width'),
            height=data.get('height')
        )


@dataclass(frozen=True)
class PlatformWarning:
    """A cross-platform display advisory"""
    severity: IssueSeverity
    platform: Platform
    message: str
    recommendation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "platform": self.platform.value,
            "message": self.message,
            "recommendation": self.recommendation
        }


@dataclass
class PlatformValidationResult:
    """Aggregated platform validation outcome"""
    is_valid: bool
    warnings: List[PlatformWarning] = field(default_factory=list)
    ios_specific: List[PlatformWarning] = field(default_factory=list)
    android_specific: List[PlatformWarning] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "warnings": [w.to_dict() for w in self.warnings],
            "iosSpecific": [w.to_dict() for w in self.ios_specific],
            "androidSpecific": [w.to_dict() for w in self.android_specific]
        }

"""
JSON API routes for the RCS Formatter.

Thin Flask layer over the compliance validator, the platform validation
engine, the media size converter and the RBM template generator.
"""

import logging
from flask import Blueprint, request, jsonify
from werkzeug.exceptions import HTTPException

from rcs_formatter.config.centralized_config import get_config
from rcs_formatter.exceptions import (
    BaseFormatterException, ValidationException, log_exception
)
from rcs_formatter.models.rcs_models import (
    Action, CarouselCard, FormatType, ImageInfo, MediaHeight, MessageFormat
)
from rcs_formatter.services.compliance_validator import ComplianceValidator
from rcs_formatter.services.platform_validation import validate_platform_format
from rcs_formatter.services.rbm_template import generate_from_format
from rcs_formatter.utils.logger import Logger
from rcs_formatter.utils.media_size_converter import (
    android_pixels_for_all_densities, aspect_ratio, fit_within_rcs_limits,
    ios_pixels_for_all_densities, preview_standard_sizes
)

logger = logging.getLogger(__name__)

formatter_bp = Blueprint('formatter', __name__, url_prefix='/api/rcs')


def _json_body():
    """Request body as a dict, or a ValidationException"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationException("Request body must be a JSON object", field="body")
    return data


def _text(data, key):
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValidationException(f"{key} must be a string", field=key, value=value)
    return value


def _non_negative_int(data, key):
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationException(f"{key} must be a non-negative integer", field=key, value=value)
    return value


@formatter_bp.errorhandler(BaseFormatterException)
def handle_formatter_error(error: BaseFormatterException):
    log_exception(logger, error, extra_context={'path': request.path})
    status = 400 if isinstance(error, ValidationException) else 422
    return jsonify({
        "error": error.user_message,
        "details": error.message,
        "correlation_id": error.correlation_id
    }), status


@formatter_bp.errorhandler(Exception)
def handle_unexpected_error(error: Exception):
    # Rate limits and routing errors keep their own status codes
    if isinstance(error, HTTPException):
        return error
    correlation_id = log_exception(logger, error, extra_context={'path': request.path})
    return jsonify({
        "error": "Internal server error",
        "correlation_id": correlation_id
    }), 500


@formatter_bp.route('/validate', methods=['POST'])
def validate_format():
    """Compliance report for a message format record."""
    message_format = MessageFormat.from_dict(_json_body())
    validator = ComplianceValidator(get_config().limits)
    report = validator.report(message_format)

    Logger.log_validation_event(
        format_type=message_format.format_type.value,
        errors=len(report.errors),
        warnings=len(report.warnings),
        infos=len(report.infos)
    )
    return jsonify(report.to_dict())


@formatter_bp.route('/validate/cards', methods=['POST'])
def validate_cards():
    """Per-card compliance issues for a carousel given as a card list."""
    data = _json_body()
    cards_data = data.get('cards')
    if not isinstance(cards_data, list):
        raise ValidationException("cards must be an array", field="cards")

    max_cards = data.get('maxCards')
    if max_cards is not None:
        max_cards = _non_negative_int(data, 'maxCards')

    cards = [CarouselCard.from_dict(card) for card in cards_data]
    validator = ComplianceValidator(get_config().limits)
    issues = validator.validate_carousel_cards(cards, max_cards=max_cards)

    return jsonify({
        "isCompliant": not any(i.severity.value == "error" for i in issues),
        "issues": [i.to_dict() for i in issues]
    })


@formatter_bp.route('/validate/platform', methods=['POST'])
def validate_platform():
    """iOS / Android display advisories for a format."""
    data = _json_body()
    format_type = data.get('formatType', data.get('format_type'))
    if format_type is None:
        raise ValidationException("Format type is required", field="formatType")

    media_height = data.get('mediaHeight')
    try:
        media_height = MediaHeight(media_height) if media_height else None
    except ValueError:
        raise ValidationException(f"Invalid media height: {media_height}", field="mediaHeight")

    result = validate_platform_format(
        format_type=FormatType.parse(format_type),
        images=[ImageInfo.from_dict(image) for image in data.get('images') or []],
        actions=[Action.from_dict(action) for action in data.get('actions') or []],
        title=_text(data, 'title'),
        description=_text(data, 'description'),
        media_height=media_height,
        limits=get_config().limits
    )
    return jsonify(result.to_dict())


@formatter_bp.route('/media-sizes', methods=['GET'])
def media_sizes():
    """DP to PX table for the standard card heights."""
    return jsonify({"sizes": preview_standard_sizes()})


@formatter_bp.route('/media-sizes/<int:dp>', methods=['GET'])
def media_size_for_dp(dp: int):
    """Android and iOS pixel values for one DP value."""
    return jsonify({
        "dp": dp,
        "android": android_pixels_for_all_densities(dp),
        "ios": ios_pixels_for_all_densities(dp)
    })


@formatter_bp.route('/dimensions', methods=['POST'])
def fit_dimensions():
    """Aspect ratio and RCS-compliant size for raw image dimensions."""
    data = _json_body()
    width = _non_negative_int(data, 'width')
    height = _non_negative_int(data, 'height')

    fitted = fit_within_rcs_limits(width, height, get_config().limits)
    return jsonify({
        "aspectRatio": aspect_ratio(width, height),
        "fitted": fitted.to_dict()
    })


@formatter_bp.route('/export', methods=['POST'])
def export_format():
    """RBM API payload for a message format record."""
    data = _json_body()
    message_format = MessageFormat.from_dict(data)
    payload = generate_from_format(message_format, defaults=get_config().template,
                                   msisdn=data.get('msisdn'))
    return jsonify(payload)

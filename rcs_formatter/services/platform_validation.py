"""
Platform Logic Engine

Advisory checks for how a composed card renders on iOS versus Android:
title and description truncation, image formats and sizes, CTA display
modes and carousel length. Each check returns a single ``PlatformWarning``
or ``None``; ``validate_platform_format`` aggregates them.
"""

import io
import logging
import math
import mimetypes
import os
from typing import Any, Dict, List, Optional, Sequence, Union
from urllib.parse import urlsplit

from PIL import Image, UnidentifiedImageError

from rcs_formatter.config.centralized_config import RcsLimits, DEFAULT_LIMITS
from rcs_formatter.exceptions import ImageProcessingException
from rcs_formatter.models.rcs_models import (
    Action, ActionType, FormatType, ImageInfo, IssueSeverity, MediaHeight,
    Platform, PlatformValidationResult, PlatformWarning
)
from rcs_formatter.utils.media_size_converter import (
    ANDROID_DENSITIES, IOS_DENSITIES, dp_to_px
)

logger = logging.getLogger(__name__)

IOS_TITLE_LIMIT = 102
IOS_TITLE_SINGLE_LINE = 60
IOS_DESCRIPTION_LIMIT = 144
IOS_CHARS_PER_LINE = 48
TARGET_ASPECT_RATIO = 2.0
ASPECT_RATIO_TOLERANCE = 0.1
MIN_IMAGE_WIDTH = 300
MIN_IMAGE_HEIGHT = 150
RECOMMENDED_CAROUSEL_CARDS = 3
PREVIEW_CARD_WIDTH = 300

SAFE_ZONE_GUIDANCE = {
    MediaHeight.SHORT: {"titleChars": 80, "descriptionChars": 200, "descriptionLines": 4},
    MediaHeight.MEDIUM: {"titleChars": 60, "descriptionChars": 144, "descriptionLines": 3},
    MediaHeight.TALL: {"titleChars": 50, "descriptionChars": 100, "descriptionLines": 2},
}


def validate_ios_title_length(title: str) -> Optional[PlatformWarning]:
    """iOS truncates titles beyond 102 characters and wraps beyond 60"""
    if not title:
        return None

    title_length = len(title)
    if title_length > IOS_TITLE_LIMIT:
        return PlatformWarning(
            severity=IssueSeverity.WARNING,
            platform=Platform.IOS,
            message=f"Title exceeds iOS limit ({title_length}/{IOS_TITLE_LIMIT} characters)",
            recommendation=(f"iOS will truncate or break title to multiple lines. Keep under "
                            f"{IOS_TITLE_LIMIT} characters for single-line display on iOS rich "
                            f"cards and carousels.")
        )
    if title_length > IOS_TITLE_SINGLE_LINE:
        return PlatformWarning(
            severity=IssueSeverity.INFO,
            platform=Platform.IOS,
            message=f"Title may wrap to 2 lines on iOS ({title_length} characters)",
            recommendation=(f"For optimal iOS display, keep titles under {IOS_TITLE_SINGLE_LINE} "
                            f"characters for single-line presentation.")
        )
    return None


def validate_ios_description_length(description: str) -> Optional[PlatformWarning]:
    """iOS shows about three lines (~144 characters) of description"""
    if not description:
        return None

    desc_length = len(description)
    if desc_length > IOS_DESCRIPTION_LIMIT:
        lines = math.ceil(desc_length / IOS_CHARS_PER_LINE)
        return PlatformWarning(
            severity=IssueSeverity.WARNING,
            platform=Platform.IOS,
            message=f"Description will be truncated on iOS ({desc_length} characters, ~{lines} lines)",
            recommendation=("iOS displays max 3 lines (~144 characters) with ellipsis. "
                            "Keep descriptions concise for iOS users.")
        )
    return None


def validate_image_format(file_name: str, mime_type: str) -> Optional[PlatformWarning]:
    """GIF is unsupported on iOS; WebP support there is partial"""
    lower_name = (file_name or "").lower()
    if mime_type == "image/gif" or lower_name.endswith(".gif"):
        return PlatformWarning(
            severity=IssueSeverity.WARNING,
            platform=Platform.IOS,
            message="GIF format not supported on iOS",
            recommendation=("iOS does not support GIF images (animated or static). This image will "
                            "not display on iOS devices. Use JPEG or PNG for cross-platform "
                            "compatibility.")
        )
    if mime_type == "image/webp" or lower_name.endswith(".webp"):
        return PlatformWarning(
            severity=IssueSeverity.INFO,
            platform=Platform.IOS,
            message="WebP may have limited iOS support",
            recommendation=("While WebP is supported on newer iOS versions, JPEG is recommended "
                            "for maximum compatibility.")
        )
    return None


def validate_image_aspect_ratio(width: int, height: int) -> Optional[PlatformWarning]:
    """2:1 is the recommended RCS media ratio"""
    if not width or not height or height <= 0:
        return None

    ratio = width / height
    if abs(ratio - TARGET_ASPECT_RATIO) > ASPECT_RATIO_TOLERANCE:
        return PlatformWarning(
            severity=IssueSeverity.INFO,
            platform=Platform.BOTH,
            message=f"Image aspect ratio is {ratio:.2f}:1 (recommended: 2:1)",
            recommendation=("Images may be cropped differently on Android (object-cover) vs iOS "
                            "(object-contain). Preview both platforms to check display.")
        )
    return None


def validate_image_dimensions(width: int, height: int,
                              limits: Optional[RcsLimits] = None) -> Optional[PlatformWarning]:
    """Images above the RCS limits get scaled down; tiny images pixelate"""
    limits = limits or DEFAULT_LIMITS
    max_width = limits.max_image_width
    max_height = limits.max_image_height

    if width > max_width or height > max_height:
        return PlatformWarning(
            severity=IssueSeverity.ERROR,
            platform=Platform.BOTH,
            message=f"Image exceeds RCS limits ({width}×{height}px, max: {max_width}×{max_height}px)",
            recommendation="Image will be automatically scaled down. For best quality, resize before upload."
        )
    if width < MIN_IMAGE_WIDTH or height < MIN_IMAGE_HEIGHT:
        return PlatformWarning(
            severity=IssueSeverity.WARNING,
            platform=Platform.BOTH,
            message=f"Image may appear pixelated ({width}×{height}px)",
            recommendation="For Medium height cards, use at least 680×340px. For Tall cards, use 1060×530px."
        )
    return None


def validate_ios_cta_count(action_count: int) -> Optional[PlatformWarning]:
    """iOS collapses several actions into a list"""
    if action_count > 1:
        return PlatformWarning(
            severity=IssueSeverity.INFO,
            platform=Platform.IOS,
            message=f"{action_count} actions will show as dropdown on iOS",
            recommendation=("iOS displays multiple actions in a collapsible list. For best UX, use 1 "
                            "primary CTA. If multiple CTAs needed, prioritize the most important one first.")
        )
    return None


def validate_carousel_count(image_count: int,
                            limits: Optional[RcsLimits] = None) -> Optional[PlatformWarning]:
    """Hard card-count limits first, then the scroll-fatigue advisory"""
    limits = limits or DEFAULT_LIMITS

    if image_count < limits.min_carousel_cards:
        return PlatformWarning(
            severity=IssueSeverity.ERROR,
            platform=Platform.BOTH,
            message=f"Carousel requires at least {limits.min_carousel_cards} images",
            recommendation=(f"Upload {limits.min_carousel_cards}-{limits.max_carousel_cards} images to "
                            f"create a carousel. For single image, use Rich Card format instead.")
        )
    if image_count > limits.max_carousel_cards:
        return PlatformWarning(
            severity=IssueSeverity.ERROR,
            platform=Platform.BOTH,
            message=f"Too many images ({image_count}/{limits.max_carousel_cards} max)",
            recommendation=(f"RCS allows maximum {limits.max_carousel_cards} images per carousel. "
                            f"Remove some images or create multiple carousels.")
        )
    if image_count > RECOMMENDED_CAROUSEL_CARDS:
        return PlatformWarning(
            severity=IssueSeverity.INFO,
            platform=Platform.BOTH,
            message=f"{image_count} cards may cause scroll fatigue",
            recommendation=("Best practice: Limit to 3 cards per carousel for better engagement. "
                            "Users often don't scroll beyond the 3rd card.")
        )
    return None


def validate_text_safe_zone(title: str, description: str,
                            media_height: MediaHeight) -> Optional[PlatformWarning]:
    """Tall media pushes long text below the fold"""
    guidance = SAFE_ZONE_GUIDANCE[MediaHeight.TALL]
    if media_height == MediaHeight.TALL and (
            len(title or "") > guidance["titleChars"]
            or len(description or "") > guidance["descriptionChars"]):
        return PlatformWarning(
            severity=IssueSeverity.INFO,
            platform=Platform.BOTH,
            message="Tall media may push text below fold on smaller screens",
            recommendation=("With tall media (264 DP), keep title under 50 chars and description "
                            "under 100 chars to ensure visibility without scrolling.")
        )
    return None


def validate_line_breaks(text: str) -> Optional[PlatformWarning]:
    """iOS may collapse repeated line breaks"""
    if not text:
        return None

    line_breaks = text.count("\n")
    if line_breaks > 2:
        return PlatformWarning(
            severity=IssueSeverity.INFO,
            platform=Platform.IOS,
            message=f"Description contains {line_breaks} line breaks",
            recommendation=("iOS may compress multiple line breaks into single spaces. Text "
                            "formatting may differ between Android and iOS.")
        )
    return None


def validate_link_preview(url: str) -> Optional[PlatformWarning]:
    """Link previews need og:image; malformed URLs are flagged"""
    if not url:
        return None

    try:
        parsed = urlsplit(url)
        valid = bool(parsed.scheme) and bool(parsed.netloc or parsed.path)
    except ValueError:
        valid = False

    if not valid:
        return PlatformWarning(
            severity=IssueSeverity.WARNING,
            platform=Platform.BOTH,
            message="Invalid URL format",
            recommendation="Ensure URL is properly formatted (e.g., https://example.com)"
        )

    # og:image tags cannot be fetched here, so this is always advisory
    return PlatformWarning(
        severity=IssueSeverity.INFO,
        platform=Platform.BOTH,
        message="Link preview requires og:image meta tag",
        recommendation=('Ensure your website has Open Graph meta tags for rich link previews. Add '
                        '<meta property="og:image" content="image-url"> to the page.')
    )


def _prefixed(warning: PlatformWarning, prefix: str) -> PlatformWarning:
    return PlatformWarning(
        severity=warning.severity,
        platform=warning.platform,
        message=f"{prefix}: {warning.message}",
        recommendation=warning.recommendation
    )


def validate_platform_format(format_type: FormatType,
                             images: Sequence[ImageInfo],
                             actions: Sequence[Action],
                             title: Optional[str] = None,
                             description: Optional[str] = None,
                             media_height: Optional[MediaHeight] = None,
                             limits: Optional[RcsLimits] = None) -> PlatformValidationResult:
    """
    Run every platform check that applies to a format.

    Returns:
        PlatformValidationResult; ``is_valid`` is False when any check is an error
    """
    warnings: List[PlatformWarning] = []
    ios_specific: List[PlatformWarning] = []
    android_specific: List[PlatformWarning] = []

    def add(warning: Optional[PlatformWarning], ios: bool = False):
        if warning:
            warnings.append(warning)
            if ios:
                ios_specific.append(warning)

    add(validate_ios_title_length(title or ""), ios=True)
    add(validate_ios_description_length(description or ""), ios=True)
    add(validate_line_breaks(description or ""), ios=True)
    add(validate_text_safe_zone(title or "", description or "", media_height or MediaHeight.MEDIUM))

    for index, image in enumerate(images):
        prefix = f"Image {index + 1}"
        format_warning = validate_image_format(image.name, image.mime_type)
        if format_warning:
            warnings.append(_prefixed(format_warning, prefix))
            ios_specific.append(format_warning)

        if image.width and image.height:
            dim_warning = validate_image_dimensions(image.width, image.height, limits)
            if dim_warning:
                warnings.append(_prefixed(dim_warning, prefix))
            aspect_warning = validate_image_aspect_ratio(image.width, image.height)
            if aspect_warning:
                warnings.append(_prefixed(aspect_warning, prefix))

    if format_type == FormatType.CAROUSEL:
        add(validate_carousel_count(len(images), limits))

    add(validate_ios_cta_count(len(actions)), ios=True)

    for index, action in enumerate(actions):
        if action.type == ActionType.URL and action.payload:
            url_warning = validate_link_preview(action.payload)
            if url_warning:
                warnings.append(_prefixed(url_warning, f"Action {index + 1}"))

    has_errors = any(w.severity == IssueSeverity.ERROR for w in warnings)
    return PlatformValidationResult(
        is_valid=not has_errors,
        warnings=warnings,
        ios_specific=ios_specific,
        android_specific=android_specific
    )


def get_safe_zone_guidance(media_height: MediaHeight) -> Dict[str, int]:
    """Character budgets that stay visible for a media height"""
    return dict(SAFE_ZONE_GUIDANCE[media_height])


def is_text_in_safe_zone(text: str, max_chars: int, platform: Platform) -> bool:
    """Android shows all text; iOS truncates"""
    if platform == Platform.ANDROID:
        return True
    return len(text) <= max_chars


def get_cropping_behavior(lock_aspect_ratio: bool, platform: Platform) -> str:
    """Describe how the image is fitted into the card"""
    if lock_aspect_ratio:
        if platform == Platform.ANDROID:
            return "Image will be contained within card bounds (may show letterboxing)"
        return "Image will be contained and centered (letterboxing applied)"

    if platform == Platform.ANDROID:
        return "Image will fill card width and crop to mediaHeight (may cut top/bottom)"
    return "Image will be contained to preserve aspect ratio"


def detect_image_cropping(image_width: int, image_height: int, target_dp: int,
                          platform: Platform, lock_aspect_ratio: bool) -> Dict[str, Any]:
    """
    Estimate whether the Messages UI will crop an image.

    Android without a locked aspect ratio fills the card width (object-cover)
    and crops the height to the media height at xhdpi; iOS and locked cards
    are never cropped.
    """
    if platform == Platform.ANDROID:
        target_px = dp_to_px(target_dp, ANDROID_DENSITIES["xhdpi"])
    else:
        target_px = dp_to_px(target_dp, IOS_DENSITIES["@2x"])

    if not lock_aspect_ratio and platform == Platform.ANDROID and image_width > 0 and image_height > 0:
        image_aspect = image_width / image_height
        scaled_height = PREVIEW_CARD_WIDTH / image_aspect

        if scaled_height > target_px:
            crop_px = scaled_height - target_px
            percent = round((crop_px / scaled_height) * 100)
            return {
                "willCrop": True,
                "cropAmount": {"top": crop_px / 2, "bottom": crop_px / 2},
                "recommendation": (f"Image will be cropped by approximately {round(crop_px)}px "
                                   f"({percent}% of height). Enable \"Lock Aspect Ratio\" or adjust "
                                   f"image aspect ratio to 2:1.")
            }

    return {"willCrop": False, "recommendation": "Image will display without cropping"}


def get_ios_cta_display_mode(action_count: int) -> Dict[str, str]:
    """How iOS lays out the card's actions"""
    if action_count == 0:
        return {"mode": "inline", "description": "No actions to display"}
    if action_count == 1:
        return {"mode": "inline", "description": "Single action will display as inline button"}
    return {
        "mode": "list",
        "description": (f"{action_count} actions will display as expandable list with chevrons. "
                        f"User must tap to see all options.")
    }


def describe_image(source: Union[str, bytes, os.PathLike], name: Optional[str] = None) -> ImageInfo:
    """
    Read name, MIME type and pixel size of an image with Pillow.

    Args:
        source: File path or raw image bytes
        name: File name to report; defaults to the path's base name

    Raises:
        ImageProcessingException: the image cannot be opened or identified
    """
    if isinstance(source, bytes):
        image_name = name or "upload"
        stream: Any = io.BytesIO(source)
    else:
        image_name = name or os.path.basename(os.fspath(source))
        stream = source

    try:
        with Image.open(stream) as img:
            width, height = img.size
            mime_type = Image.MIME.get(img.format or "", "")
    except (OSError, UnidentifiedImageError) as e:
        raise ImageProcessingException(
            f"Cannot read image {image_name}: {str(e)}", image_name=image_name, original_exception=e
        )

    if not mime_type:
        mime_type = mimetypes.guess_type(image_name)[0] or ""

    logger.debug(f"Read image {image_name}: {width}x{height} {mime_type}")
    return ImageInfo(name=image_name, mime_type=mime_type, width=width, height=height)

"""
Media Size Converter

Converts density-independent pixels (DP) to physical pixels for Android
density buckets (mdpi .. xxxhdpi) and iOS Retina scales (@1x .. @3x), and
scales raw image sizes into the RCS media limits.
"""

import math
import logging
from types import MappingProxyType
from typing import Dict, List, Any, Optional

from rcs_formatter.config.centralized_config import RcsLimits, DEFAULT_LIMITS
from rcs_formatter.exceptions import ValidationException
from rcs_formatter.models.rcs_models import Dimensions

logger = logging.getLogger(__name__)

# Android mdpi baseline
BASELINE_DPI = 160

ANDROID_DENSITIES = MappingProxyType({
    "mdpi": 160,
    "hdpi": 240,
    "xhdpi": 320,
    "xxhdpi": 480,
    "xxxhdpi": 640
})

IOS_DENSITIES = MappingProxyType({
    "@1x": 163,
    "@2x": 326,
    "@3x": 458
})

# Short, Medium and Tall rich card media heights
STANDARD_MEDIA_HEIGHTS = (
    ("Short", 112),
    ("Medium", 168),
    ("Tall", 264),
)

DEGENERATE_ASPECT_RATIO = "0:0"


def _round_half_up(value: float) -> int:
    """Round with halves going toward +infinity"""
    return int(math.floor(value + 0.5))


def dp_to_px(dp: float, reference_density: float = BASELINE_DPI) -> int:
    """
    Convert DP to PX for a given density.

    Args:
        dp: Density-independent pixels
        reference_density: DPI (Android) or PPI (iOS); defaults to the mdpi baseline

    Returns:
        Pixel value
    """
    return _round_half_up(dp * (reference_density / BASELINE_DPI))


def android_pixels_for_all_densities(dp: float) -> Dict[str, int]:
    """Pixel values for every Android density bucket"""
    return {label: dp_to_px(dp, dpi) for label, dpi in ANDROID_DENSITIES.items()}


def ios_pixels_for_all_densities(dp: float) -> Dict[str, int]:
    """Pixel values for every iOS Retina scale"""
    return {label: dp_to_px(dp, ppi) for label, ppi in IOS_DENSITIES.items()}


def preview_standard_sizes() -> List[Dict[str, Any]]:
    """DP to PX conversions for the Short, Medium and Tall card heights"""
    return [
        {
            "label": label,
            "dp": dp,
            "android": android_pixels_for_all_densities(dp),
            "ios": ios_pixels_for_all_densities(dp)
        }
        for label, dp in STANDARD_MEDIA_HEIGHTS
    ]


def recommended_px(dp: float, platform: str, density: str) -> int:
    """
    Pixel value for one platform density.

    Raises:
        ValidationException: unknown platform or density label
    """
    if platform == "android":
        table = ANDROID_DENSITIES
    elif platform == "ios":
        table = IOS_DENSITIES
    else:
        raise ValidationException(f"Unknown platform: {platform}", field="platform", value=platform)

    if density not in table:
        raise ValidationException(
            f"Unknown {platform} density: {density}", field="density", value=density
        )
    return dp_to_px(dp, table[density])


def aspect_ratio(width: int, height: int) -> str:
    """
    Reduced aspect ratio such as ``16:9``.

    Returns ``DEGENERATE_ASPECT_RATIO`` when either side is not positive.
    """
    if width <= 0 or height <= 0:
        return DEGENERATE_ASPECT_RATIO
    divisor = math.gcd(int(width), int(height))
    return f"{int(width) // divisor}:{int(height) // divisor}"


def fit_within_rcs_limits(width: int, height: int,
                          limits: Optional[RcsLimits] = None) -> Dimensions:
    """
    Scale image dimensions down into the RCS media limits.

    Width is capped first and the height recomputed; the resulting height is
    then checked and, if still too large, capped with the width recomputed.
    The two passes run in that order, so the final width may end up below
    the width cap.
    """
    limits = limits or DEFAULT_LIMITS
    max_width = limits.max_image_width
    max_height = limits.max_image_height

    scaled = False

    if width > max_width:
        ratio = max_width / width
        width = max_width
        height = _round_half_up(height * ratio)
        scaled = True

    if height > max_height:
        ratio = max_height / height
        height = max_height
        width = _round_half_up(width * ratio)
        scaled = True

    if scaled:
        logger.debug(f"Scaled image into RCS limits: {width}x{height}")

    return Dimensions(width=int(width), height=int(height), scaled=scaled)

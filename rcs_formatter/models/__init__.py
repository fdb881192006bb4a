"""
RCS message format data models
"""

from .rcs_models import (
    FormatType,
    CardOrientation,
    MediaHeight,
    ActionType,
    IssueSeverity,
    IssueCategory,
    Platform,
    Action,
    MessageFormat,
    CarouselCard,
    ComplianceIssue,
    ComplianceReport,
    Dimensions,
    ImageInfo,
    PlatformWarning,
    PlatformValidationResult
)

__all__ = [
    'FormatType',
    'CardOrientation',
    'MediaHeight',
    'ActionType',
    'IssueSeverity',
    'IssueCategory',
    'Platform',
    'Action',
    'MessageFormat',
    'CarouselCard',
    'ComplianceIssue',
    'ComplianceReport',
    'Dimensions',
    'ImageInfo',
    'PlatformWarning',
    'PlatformValidationResult'
]

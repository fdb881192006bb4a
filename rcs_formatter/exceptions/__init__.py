"""
Centralized exception hierarchy for the RCS Formatter application.

The compliance validator and the media size converter never raise for
well-typed input; the exceptions below are raised at the boundaries only
(parsing persisted records, unknown densities, payload generation, image
inspection and configuration loading).
"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for classification and alerting."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories for different types of errors."""
    VALIDATION_ERROR = "validation_error"
    TEMPLATE_ERROR = "template_error"
    DATA_ERROR = "data_error"
    CONFIGURATION_ERROR = "configuration_error"
    SERVICE_ERROR = "service_error"


class BaseFormatterException(Exception):
    """
    Base exception class for all RCS Formatter errors.

    Carries a correlation ID, a category and a severity so that the HTTP
    layer can log and report failures consistently.
    """

    def __init__(
        self,
        message: str,
        correlation_id: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.SERVICE_ERROR,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        """
        Initialize base exception with error context.

        Args:
            message: Technical error message for logging
            correlation_id: Unique identifier for error tracking
            category: Error category for classification
            severity: Error severity level
            context: Additional context data
            original_exception: Original exception that caused this error
            user_message: User-friendly error message
        """
        super().__init__(message)

        self.message = message
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.category = category
        self.severity = severity
        self.context = context or {}
        self.original_exception = original_exception
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        if original_exception:
            self.context['original_error'] = {
                'type': type(original_exception).__name__,
                'message': str(original_exception)
            }

    def log_error(self, logger: logging.Logger, extra_context: Optional[Dict[str, Any]] = None):
        """Log error with structured format and correlation ID."""
        context = self.context.copy()
        if extra_context:
            context.update(extra_context)

        log_data = {
            'correlation_id': self.correlation_id,
            'error_category': self.category.value,
            'error_severity': self.severity.value,
            'timestamp': self.timestamp.isoformat(),
            'context': context
        }

        if self.severity == ErrorSeverity.CRITICAL:
            logger.critical(f"CRITICAL ERROR: {self.message}", extra=log_data)
        elif self.severity == ErrorSeverity.HIGH:
            logger.error(f"HIGH SEVERITY: {self.message}", extra=log_data)
        elif self.severity == ErrorSeverity.MEDIUM:
            logger.warning(f"MEDIUM SEVERITY: {self.message}", extra=log_data)
        else:
            logger.info(f"LOW SEVERITY: {self.message}", extra=log_data)


class ValidationException(BaseFormatterException):
    """Input shape and data format errors."""

    def __init__(self, message: str, field: str, value: Any = None, **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION_ERROR,
            severity=ErrorSeverity.LOW,
            user_message=kwargs.pop('user_message', None) or message,
            **kwargs
        )
        self.field = field
        self.value = value
        self.context.update({
            'field': field,
            'value': str(value) if value is not None else None
        })


class TemplateGenerationException(BaseFormatterException):
    """RBM payload generation errors."""

    def __init__(self, message: str, template_type: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.TEMPLATE_ERROR,
            severity=ErrorSeverity.MEDIUM,
            user_message="Could not generate the RBM payload for this format.",
            **kwargs
        )
        self.template_type = template_type
        if template_type:
            self.context.update({'template_type': template_type})


class ImageProcessingException(BaseFormatterException):
    """Image inspection errors."""

    def __init__(self, message: str, image_name: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.DATA_ERROR,
            severity=ErrorSeverity.MEDIUM,
            user_message="The image could not be read.",
            **kwargs
        )
        self.image_name = image_name
        if image_name:
            self.context.update({'image_name': image_name})


class ConfigurationException(BaseFormatterException):
    """Configuration and setup errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION_ERROR,
            severity=ErrorSeverity.CRITICAL,
            user_message="Service configuration error. Please contact support.",
            **kwargs
        )
        self.config_key = config_key
        if config_key:
            self.context.update({'config_key': config_key})


def create_correlation_id() -> str:
    """Generate a unique correlation ID for error tracking."""
    return str(uuid.uuid4())


def log_exception(
    logger: logging.Logger,
    exception: Exception,
    correlation_id: Optional[str] = None,
    extra_context: Optional[Dict[str, Any]] = None
) -> str:
    """
    Log any exception with structured format and correlation tracking.

    Returns:
        The correlation ID the exception was logged under
    """
    context = extra_context or {}

    if isinstance(exception, BaseFormatterException):
        exception.log_error(logger, context)
        return exception.correlation_id

    correlation_id = correlation_id or create_correlation_id()
    log_data = {
        'correlation_id': correlation_id,
        'error_type': type(exception).__name__,
        'context': context
    }
    logger.error(f"Unhandled exception: {str(exception)}", extra=log_data, exc_info=True)
    return correlation_id


__all__ = [
    'ErrorSeverity',
    'ErrorCategory',
    'BaseFormatterException',
    'ValidationException',
    'TemplateGenerationException',
    'ImageProcessingException',
    'ConfigurationException',
    'create_correlation_id',
    'log_exception'
]

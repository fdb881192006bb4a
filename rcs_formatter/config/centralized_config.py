"""
Centralized Configuration System for the RCS Formatter

Uses Pydantic for validation and type checking and pydantic-settings for
environment variable loading. The rule-engine limits live in ``RcsLimits``
and are passed explicitly into the validator and converter calls.
"""

import os
import logging
from typing import List, Dict, Any, Optional
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict, SecretStr
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from rcs_formatter.exceptions import ConfigurationException

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Application environment types"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging level options"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class RcsLimits(BaseModel):
    """RCS specification limits shared by every validator scope"""
    max_title_length: int = Field(default=200, ge=1, description="Maximum title characters")
    max_description_length: int = Field(default=2000, ge=1, description="Maximum description characters")
    max_action_text_length: int = Field(default=25, ge=1, description="Maximum button text characters")
    max_actions: int = Field(default=4, ge=1, description="Maximum actions per card")
    min_carousel_cards: int = Field(default=2, ge=1, description="Minimum carousel cards")
    max_carousel_cards: int = Field(default=10, ge=1, description="Maximum carousel cards")
    min_phone_digits: int = Field(default=10, ge=1, description="Minimum digits in a phone number")
    max_phone_digits: int = Field(default=15, ge=1, description="Maximum digits in a phone number")
    short_title_length: int = Field(default=10, ge=0, description="Titles below this length get a hint")
    max_image_width: int = Field(default=1500, ge=1, description="Maximum RCS image width in px")
    max_image_height: int = Field(default=1000, ge=1, description="Maximum RCS image height in px")

    @model_validator(mode='after')
    def validate_ranges(self):
        if self.min_carousel_cards > self.max_carousel_cards:
            raise ValueError("min_carousel_cards cannot exceed max_carousel_cards")
        if self.min_phone_digits > self.max_phone_digits:
            raise ValueError("min_phone_digits cannot exceed max_phone_digits")
        return self

    model_config = ConfigDict(frozen=True)


DEFAULT_LIMITS = RcsLimits()


class TemplateDefaults(BaseModel):
    """Defaults for generated RBM payloads"""
    msisdn: str = Field(default="+12223334444", description="Default recipient phone number")
    brand_display_name: str = Field(default="", description="Brand name shown above the card")
    verified: bool = Field(default=True, description="Show the verified brand badge")
    card_width: str = Field(default="MEDIUM", pattern="^(SMALL|MEDIUM)$", description="Carousel card width")
    media_height: str = Field(default="MEDIUM", pattern="^(SHORT|MEDIUM|TALL)$")
    orientation: str = Field(default="VERTICAL", pattern="^(VERTICAL|HORIZONTAL)$")

    @field_validator('msisdn')
    @classmethod
    def validate_msisdn(cls, v):
        if not v.startswith('+'):
            raise ValueError("Default msisdn must use international format (+...)")
        return v

    model_config = ConfigDict(frozen=True)


class ApplicationConfig(BaseModel):
    """General application configuration"""
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=True)
    log_level: LogLevel = Field(default=LogLevel.INFO)
    session_secret: SecretStr = Field(
        default_factory=lambda: SecretStr(os.urandom(24).hex()),
        description="Flask session secret key"
    )
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)

    @field_validator('debug')
    @classmethod
    def validate_debug_mode(cls, v, info):
        if info.data.get('environment') == Environment.PRODUCTION and v:
            logger.warning("Debug mode enabled in production environment")
        return v

    model_config = ConfigDict(frozen=True)


class RateLimitConfig(BaseModel):
    """Rate limiting configuration"""
    enabled: bool = Field(default=True)
    default_limits: List[str] = Field(default_factory=lambda: ["200 per day", "50 per hour"])
    storage_uri: str = Field(default="memory://")
    api_limit: str = Field(default="60 per minute")

    model_config = ConfigDict(frozen=True)


class FormatterConfig(BaseSettings):
    """
    Centralized configuration for the RCS Formatter.

    Nested values are read from ``RCS_<SECTION>__<FIELD>`` environment
    variables, e.g. ``RCS_LIMITS__MAX_ACTIONS=4``.
    """

    config_version: str = Field(default="1.0.0")

    application: ApplicationConfig = Field(default_factory=ApplicationConfig)
    limits: RcsLimits = Field(default_factory=RcsLimits)
    template: TemplateDefaults = Field(default_factory=TemplateDefaults)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)

    model_config = SettingsConfigDict(
        env_prefix="RCS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    @classmethod
    def from_env(cls) -> "FormatterConfig":
        """Create configuration from the environment, wrapping pydantic errors"""
        try:
            return cls()
        except PydanticValidationError as e:
            raise ConfigurationException(
                f"Invalid configuration: {e.error_count()} error(s): {e.errors()[0]['msg']}",
                original_exception=e
            )

    def get_summary(self) -> Dict[str, Any]:
        """Configuration summary without secrets"""
        return {
            "config_version": self.config_version,
            "environment": self.application.environment.value,
            "debug": self.application.debug,
            "log_level": self.application.log_level.value,
            "limits": self.limits.model_dump(),
            "template_defaults": self.template.model_dump(),
            "rate_limit_enabled": self.rate_limit.enabled
        }


_config_instance: Optional[FormatterConfig] = None


def get_config() -> FormatterConfig:
    """
    Get the global configuration instance.

    Returns:
        FormatterConfig: The configuration instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = FormatterConfig.from_env()
    return _config_instance


def reload_config() -> FormatterConfig:
    """
    Reload configuration from environment variables.

    Keeps the previous instance when the new environment is invalid.
    """
    global _config_instance

    load_dotenv(override=True)
    old_config = _config_instance

    try:
        _config_instance = FormatterConfig.from_env()
        logger.info("Configuration reloaded successfully")
        return _config_instance
    except ConfigurationException as e:
        logger.error(f"Failed to reload configuration: {e.message}")
        if old_config:
            logger.info("Keeping previous configuration due to reload failure")
            return old_config
        raise


def reset_config() -> None:
    """Force the next get_config() call to build a new instance."""
    global _config_instance
    _config_instance = None
    logger.info("Configuration instance reset")


__all__ = [
    "FormatterConfig",
    "RcsLimits",
    "DEFAULT_LIMITS",
    "TemplateDefaults",
    "ApplicationConfig",
    "RateLimitConfig",
    "Environment",
    "LogLevel",
    "get_config",
    "reload_config",
    "reset_config"
]

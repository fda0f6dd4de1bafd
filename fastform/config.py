"""
Engine Configuration

Uses pydantic-settings for environment variable loading with validation.
All tunables of the validation engine are centralized here.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Environment variables can be set directly or via .env file,
    e.g. FASTFORM_SANITIZER_MAX_DEPTH=8.
    """

    model_config = SettingsConfigDict(
        env_prefix="FASTFORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Logging
    # ==========================================================================
    debug: bool = Field(
        default=False,
        description="Enable DEBUG logging for the engine loggers"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level used by configure_logging()"
    )

    # ==========================================================================
    # Sanitizer
    # ==========================================================================
    sanitizer_max_depth: int = Field(
        default=10,
        ge=1,
        description="Maximum nesting depth walked by the data sanitizer"
    )

    sanitizer_overflow: Literal["truncate", "reject"] = Field(
        default="truncate",
        description="What to do with values nested deeper than sanitizer_max_depth"
    )

    # ==========================================================================
    # Spec limits
    # ==========================================================================
    max_fields_per_spec: int = Field(
        default=200,
        ge=1,
        description="Maximum number of declared fields across all pages of an AppSpec"
    )

    # ==========================================================================
    # Field rules
    # ==========================================================================
    tel_min_length: int = Field(
        default=7,
        ge=1,
        description="Minimum length of a tel value (characters, not digits)"
    )

    tel_max_length: int = Field(
        default=20,
        ge=1,
        description="Maximum length of a tel value (characters, not digits)"
    )

    @model_validator(mode="after")
    def validate_tel_bounds(self):
        if self.tel_min_length > self.tel_max_length:
            raise ValueError("tel_min_length must not exceed tel_max_length")
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()

"""
Configuration Management for Contribution Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
CRA limit defaults change every tax year, so they live in settings
rather than being scattered through the ledger.
"""

from functools import lru_cache
from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LimitDefaultsSettings(BaseSettings):
    """
    CRA contribution limit defaults.

    Used when a user (typically a newly added spouse) has not yet entered
    figures from a Notice of Assessment.
    """

    model_config = SettingsConfigDict(
        env_prefix="CRA_",
        extra="ignore"
    )

    rrsp_default_room: Decimal = Field(
        default=Decimal("31560"),
        ge=0,
        description="RRSP tax-year room assumed before a Notice of Assessment is entered"
    )
    tfsa_annual_limit: Decimal = Field(
        default=Decimal("7000"),
        ge=0,
        description="TFSA annual dollar limit"
    )
    tfsa_default_cumulative_room: Decimal = Field(
        default=Decimal("95000"),
        ge=0,
        description="TFSA cumulative room assumed for a new user"
    )
    fhsa_annual_limit: Decimal = Field(
        default=Decimal("8000"),
        ge=0,
        description="FHSA annual participation room"
    )
    fhsa_lifetime_limit: Decimal = Field(
        default=Decimal("40000"),
        ge=0,
        description="FHSA lifetime contribution limit"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_json: bool = Field(
        default=False,
        description="Render log events as JSON instead of console output"
    )

    # Household rules
    block_over_contribution: bool = Field(
        default=False,
        description="Reject contributions that exceed the available room"
    )

    # Validation thresholds
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future a transaction date can be"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def app(self) -> AppSettings:
        return AppSettings()

    @property
    def limits(self) -> LimitDefaultsSettings:
        return LimitDefaultsSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an extra
    "<name>_error" entry holding the message for each failing section.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.app
        results["app"] = True
    except ValueError as e:
        results["app"] = False
        results["app_error"] = str(e)

    try:
        _ = settings.limits
        results["limits"] = True
    except ValueError as e:
        results["limits"] = False
        results["limits_error"] = str(e)

    return results

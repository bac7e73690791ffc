"""Configuration package."""

from contribution_tracker.config.settings import (
    AppSettings,
    LimitDefaultsSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "LimitDefaultsSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]

"""Configuration package."""

from registry_portal.config.settings import (
    AppSettings,
    GeminiSettings,
    LedgerSettings,
    RegistrySettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GeminiSettings",
    "LedgerSettings",
    "RegistrySettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]

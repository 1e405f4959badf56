"""Configuration package."""

from sigeg.config.settings import (
    PROJECT_ROOT,
    ApiSettings,
    AppSettings,
    AuthSettings,
    ClientSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "PROJECT_ROOT",
    "ApiSettings",
    "AppSettings",
    "AuthSettings",
    "ClientSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]

"""Configuration package."""

from ledger.config.settings import (
    BrandingSettings,
    Settings,
    StorageSettings,
    VoucherSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "BrandingSettings",
    "Settings",
    "StorageSettings",
    "VoucherSettings",
    "get_settings",
    "validate_all_settings",
]

"""
Configuration Management for the Association Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, default branding and voucher limits are the only knobs;
everything else about the ledger is data in the document itself.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local durable storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".spsib-ledger",
        description="Directory holding the persisted ledger document"
    )
    state_key: str = Field(
        default="current_state",
        min_length=1,
        description="Fixed key the whole document is stored under"
    )
    backup_filename: str = Field(
        default="SPSIB_BACKUP.json",
        description="Suggested filename for exported backups"
    )

    @field_validator('state_key')
    @classmethod
    def validate_state_key(cls, v: str) -> str:
        """The key becomes a filename, so path separators are not allowed."""
        if "/" in v or "\\" in v or v in {".", ".."}:
            raise ValueError(f"Invalid state key: {v!r}")
        return v


class BrandingSettings(BaseSettings):
    """Default branding for a freshly created ledger."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_BRANDING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    main_title: str = Field(
        default="SPSIB ASSOCIATION",
        description="Main title shown on statements"
    )
    sub_title: str = Field(
        default="OFFICIAL DIGITAL AUDIT STATEMENT",
        description="Subtitle shown on statements"
    )
    default_payment_amount: float = Field(
        default=600.0,
        gt=0,
        description="Amount pre-filled in the payment entry form"
    )


class VoucherSettings(BaseSettings):
    """Limits for voucher images attached to expenditures."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_VOUCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    max_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum voucher image size in MB"
    )
    allowed_formats: str = Field(
        default="jpeg,png,webp,gif",
        description="Comma-separated list of Pillow format names accepted"
    )

    @property
    def allowed_formats_list(self) -> list[str]:
        """Get allowed formats as a list of upper-case Pillow format names."""
        return [fmt.strip().upper() for fmt in self.allowed_formats.split(",") if fmt.strip()]

    @property
    def max_size_bytes(self) -> int:
        """Get max voucher size in bytes."""
        return self.max_size_mb * 1024 * 1024


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
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def branding(self) -> BrandingSettings:
        return BrandingSettings()

    @property
    def voucher(self) -> VoucherSettings:
        return VoucherSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus `<name>_error` entries
    for anything that failed. Useful for startup checks.
    """
    results: dict[str, object] = {}

    settings = get_settings()

    for name in ("storage", "branding", "voucher"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results

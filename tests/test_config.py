"""Tests for configuration loading."""

import pytest

from ledger.config import StorageSettings, get_settings, validate_all_settings


class TestSettings:

    def test_defaults(self):
        settings = get_settings()
        assert settings.storage.state_key == "current_state"
        assert settings.storage.backup_filename == "SPSIB_BACKUP.json"
        assert settings.branding.default_payment_amount == 600
        assert settings.voucher.allowed_formats_list == ["JPEG", "PNG", "WEBP", "GIF"]

    def test_storage_fields(self):
        """Only settings something reads are declared."""
        assert set(StorageSettings.model_fields) == {"data_dir", "state_key", "backup_filename"}

    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LEDGER_STORAGE_DATA_DIR", str(tmp_path / "elsewhere"))
        assert get_settings().storage.data_dir == tmp_path / "elsewhere"

    @pytest.mark.parametrize("key", ["../escape", "a/b", ".."])
    def test_state_key_cannot_be_a_path(self, monkeypatch, key):
        monkeypatch.setenv("LEDGER_STORAGE_STATE_KEY", key)
        results = validate_all_settings()
        assert results["storage"] is False
        assert "storage_error" in results

    def test_validate_all_ok(self):
        assert validate_all_settings() == {"storage": True, "branding": True, "voucher": True}

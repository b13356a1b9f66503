"""Tests for settings."""

import json
from decimal import Decimal
from pathlib import Path

import pytest

from b2b_pricing.core import config
from b2b_pricing.core.config import Settings


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setattr(config, "get_config_dir", lambda: tmp_path)
    monkeypatch.setattr(config, "_settings", None)
    return tmp_path


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.pricing.default_margin_percent == Decimal("30")
        assert settings.pricing.default_pvp_markup == Decimal("1.3")
        assert settings.pricing.default_weight_kg == Decimal("0.5")
        assert settings.delivery.days_min == 7
        assert settings.delivery.days_max == 21
        assert settings.cache.reference_ttl_seconds == 300

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("B2B_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("B2B_PRICING__DEFAULT_MARGIN_PERCENT", "25")
        settings = Settings()
        assert settings.log_level == "DEBUG"
        assert settings.pricing.default_margin_percent == Decimal("25")

    def test_database_url(self, config_dir: Path) -> None:
        assert Settings(database_url="sqlite:///:memory:").get_database_url() == "sqlite:///:memory:"
        assert Settings().get_database_url() == f"sqlite:///{config_dir / 'data' / 'pricing.db'}"

    def test_save_and_load(self, config_dir: Path) -> None:
        settings = Settings()
        settings.pricing.default_pvp_markup = Decimal("1.45")
        settings.delivery.days_max = 30
        settings.save()

        assert (config_dir / "settings.json").exists()
        loaded = Settings.load()
        assert loaded.pricing.default_pvp_markup == Decimal("1.45")
        assert loaded.delivery.days_max == 30

    def test_env_overrides_saved_file(self, config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        Settings().save()
        monkeypatch.setenv("B2B_PRICING__DEFAULT_MARGIN_PERCENT", "25")
        monkeypatch.setenv("B2B_LOG_LEVEL", "ERROR")

        loaded = Settings.load()
        assert loaded.pricing.default_margin_percent == Decimal("25")
        assert loaded.pricing.default_pvp_markup == Decimal("1.3")
        assert loaded.log_level == "ERROR"

    def test_saved_decimals_are_strings(self, config_dir: Path) -> None:
        Settings().save()
        data = json.loads((config_dir / "settings.json").read_text())
        assert data["pricing"]["default_pvp_markup"] == "1.3"

    def test_load_without_file(self, config_dir: Path) -> None:
        assert Settings.load().pricing.default_destination_code == "HT"

    def test_reload_settings(self, config_dir: Path) -> None:
        settings = Settings()
        settings.log_level = "WARNING"
        settings.save()
        assert config.reload_settings().log_level == "WARNING"
        assert config.get_settings().log_level == "WARNING"


def test_setup_logging_creates_log_dir(config_dir: Path) -> None:
    config.setup_logging(Settings(log_level="DEBUG"))
    assert (config_dir / "logs").is_dir()

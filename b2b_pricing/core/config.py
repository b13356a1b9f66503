"""Configuration management for the B2B pricing engine."""

from __future__ import annotations

import json
import logging
import sys
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

logger = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_dir = Path.home() / ".b2b-pricing-engine"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_dir = get_config_dir() / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_db_path() -> Path:
    """Get the SQLite database file path."""
    return get_data_dir() / "pricing.db"


class PricingDefaults(BaseModel):
    """Fallbacks applied when reference data is missing."""

    default_margin_percent: Decimal = Decimal("30")
    default_pvp_markup: Decimal = Decimal("1.3")
    default_weight_kg: Decimal = Decimal("0.5")
    default_destination_code: str = "HT"
    origin_name: str = "China"
    standard_route_name: str = "Standard route"


class DeliveryDefaults(BaseModel):
    """Delivery window used when no route data is available."""

    days_min: int = 7
    days_max: int = 21


class CacheConfig(BaseModel):
    """Reference data cache configuration."""

    enabled: bool = True
    reference_ttl_seconds: int = 300


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=str(get_config_dir() / ".env"),
        env_file_encoding="utf-8",
        env_prefix="B2B_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    pricing: PricingDefaults = Field(default_factory=PricingDefaults)
    delivery: DeliveryDefaults = Field(default_factory=DeliveryDefaults)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    database_url: str = ""
    log_level: str = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment and .env take precedence over values saved in settings.json
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    def get_database_url(self) -> str:
        """Get the configured database URL, or the default SQLite file."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{get_db_path()}"

    def save(self) -> None:
        """Save settings to the config file."""
        config_path = get_config_dir() / "settings.json"
        data = self.model_dump(mode="json")
        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from the config file or create defaults."""
        config_path = get_config_dir() / "settings.json"

        if config_path.exists():
            with open(config_path) as f:
                data = json.load(f)
            return cls(**data)

        return cls()


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from disk."""
    global _settings
    _settings = Settings.load()
    return _settings


def setup_logging(settings: Settings | None = None) -> None:
    """Configure application logging."""
    settings = settings or get_settings()
    log_dir = get_config_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / "pricing.log"

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.StreamHandler(sys.stdout),
        ],
    )

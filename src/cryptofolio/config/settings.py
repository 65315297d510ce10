"""Application settings and configuration."""

from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory based on platform."""
    return Path.home() / ".cryptofolio"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Cryptofolio"
    app_version: str = "0.1.0"

    # Data directory (database and local settings live here)
    data_dir: Optional[Path] = None

    # Record store (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None
    record_store_read_only: bool = False

    log_level: str = "INFO"

    # Valuation
    price_cache_ttl_seconds: int = 300
    price_refresh_interval_seconds: float = 120.0
    refresh_throttle_seconds: float = 1.0

    # Retry policy for record store calls
    retry_max_retries: int = 3
    retry_base_delay_seconds: float = 1.0

    # Quote source
    quote_source: Literal["stub", "coingecko"] = "stub"
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    coingecko_api_key: Optional[str] = None
    coingecko_timeout_seconds: float = 10.0
    coin_list_ttl_seconds: int = 3600

    # Connectivity detection
    connectivity_probe_enabled: bool = True
    connectivity_probe_host: str = "1.1.1.1"
    connectivity_probe_port: int = 53
    connectivity_check_interval_seconds: float = 30.0

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "portfolio.db"
        return f"sqlite:///{db_path}"

    def get_local_settings_path(self) -> Path:
        """Get the path of the on-device settings fallback file."""
        return self.get_data_dir() / "settings.json"


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None

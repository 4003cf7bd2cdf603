"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory based on platform."""
    return Path.home() / "Documents" / "Share Value Data"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SHAREVALUE_",
    )

    app_name: str = "Share Value Tracker"
    app_version: str = "0.1.0"

    # Data directory (the cache database lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"
    # Also write a rotating log file in the data directory
    log_to_file: bool = False

    # Holding being valued
    symbol: str = "TSLA"
    base_currency: str = "USD"
    quote_currency: str = "GBP"

    # "yfinance" for live data, "stub" for offline operation
    provider: str = "yfinance"

    # Prefix for every cache key
    cache_namespace: str = "share-value"

    # Refresh cadence
    live_refresh_seconds: int = 5 * 60
    historical_refresh_seconds: int = 24 * 60 * 60
    long_range_revalidate_seconds: int = 7 * 24 * 60 * 60
    history_years: int = 2
    fetch_timeout_seconds: float = 10.0

    # Used when neither the source nor the cache has a value
    default_price: float = 0.0
    default_rate: float = 0.78

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "share_value.db"
        return f"sqlite:///{db_path}"

    @property
    def rate_pair(self) -> str:
        return f"{self.base_currency.upper()}/{self.quote_currency.upper()}"


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

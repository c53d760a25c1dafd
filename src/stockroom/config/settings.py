"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables (and an optional .env file)
with sensible defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """JSON file storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    batches_file: str = "batches.json"
    orders_file: str = "orders.json"
    products_file: str = "products.json"
    suppliers_file: str = "suppliers.json"
    carts_file: str = "carts.json"
    latches_file: str = "low_stock_latches.json"


class InventorySettings(BaseSettings):
    """Ledger and order rules."""

    model_config = SettingsConfigDict(env_prefix="INVENTORY_")

    default_low_stock_threshold: int = Field(default=10, ge=0)
    max_retries: int = Field(default=3, ge=1)  # optimistic-lock retry ceiling
    max_order_lines: int = Field(default=50, ge=1)
    lock_timeout_seconds: float = Field(default=5.0, gt=0)


class AlertSettings(BaseSettings):
    """Low-stock alert delivery."""

    model_config = SettingsConfigDict(env_prefix="ALERT_")

    webhook_url: str | None = None  # log-only when unset
    timeout_seconds: float = Field(default=5.0, gt=0)
    workers: int = Field(default=2, ge=1)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "stockroom"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    inventory: InventorySettings = Field(default_factory=InventorySettings)
    alerts: AlertSettings = Field(default_factory=AlertSettings)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None

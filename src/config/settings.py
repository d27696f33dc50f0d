"""
Application settings with Pydantic v2 validation.

Every group reads its own environment prefix (``STORAGE_``, ``API_``,
``WORK_ORDERS_``, ``NOTIFY_``); top-level values come from the plain
environment or a ``.env`` file.
"""

import re
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PREFIX_PATTERN = re.compile(r"^[A-Z][A-Z0-9]{0,7}$")


class StorageSettings(BaseSettings):
    """SQLite database location and pool sizing."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "stockline.db"

    pool_size: int = Field(default=5, ge=1)
    busy_timeout: int = Field(default=30000, ge=0)  # ms
    acquire_timeout: float | None = 10.0  # seconds; None waits forever

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    """HTTP server and list endpoint limits."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]

    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=200, ge=1)

    @model_validator(mode="after")
    def check_page_sizes(self) -> "APISettings":
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size cannot exceed max_page_size")
        return self


class WorkOrderSettings(BaseSettings):
    """Work order numbering and stock alerts."""

    model_config = SettingsConfigDict(env_prefix="WORK_ORDERS_")

    order_number_prefix: str = "WO"
    notify_low_stock: bool = True

    @field_validator("order_number_prefix")
    @classmethod
    def check_prefix(cls, v: str) -> str:
        v = v.strip().upper()
        if not _PREFIX_PATTERN.match(v):
            raise ValueError("order_number_prefix must be 1-8 letters or digits")
        return v


class NotificationSettings(BaseSettings):
    """Where committed state changes are announced."""

    model_config = SettingsConfigDict(env_prefix="NOTIFY_")

    enabled: bool = True
    webhook_url: str | None = None
    timeout: float = Field(default=5.0, gt=0)  # seconds

    @field_validator("webhook_url")
    @classmethod
    def check_webhook_url(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("webhook_url must be an http(s) URL")
        return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Stockline Inventory Service"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)
    work_orders: WorkOrderSettings = Field(default_factory=WorkOrderSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None

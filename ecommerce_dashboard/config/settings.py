"""
E-Commerce Admin Dashboard
Centralized Configuration Management

Pydantic settings with environment variable support, validation, and type
safety. Every section can be overridden through the environment or a `.env`
file in the working directory.
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """SQLite Database Configuration"""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    path: str = Field(default="./ecommerce.db", description="SQLite database file")
    echo: bool = Field(default=False, description="Echo SQL queries")

    @property
    def async_url(self) -> str:
        """Async database URL for aiosqlite"""
        return f"sqlite+aiosqlite:///{self.path}"


class EtlSettings(BaseSettings):
    """CSV Ingestion Configuration"""

    model_config = SettingsConfigDict(env_prefix="ETL_")

    data_dir: str = Field(default="./archive", description="Directory holding the source CSV files")
    row_limit: Optional[int] = Field(default=5000, ge=1, description="Max rows loaded per file (0 or empty = no cap)")
    delimiter: str = Field(default=",", description="CSV field delimiter")

    users_file: str = Field(default="users.csv", description="Users source file")
    orders_file: str = Field(default="orders.csv", description="Orders source file")
    products_file: str = Field(default="products.csv", description="Products source file")
    order_items_file: str = Field(default="order_items.csv", description="Order items source file")

    def sources(self, data_dir: Optional[str] = None) -> Dict[str, Path]:
        """Source file for each table, in load order."""
        base = Path(data_dir or self.data_dir)
        return {
            "users": base / self.users_file,
            "orders": base / self.orders_file,
            "products": base / self.products_file,
            "order_items": base / self.order_items_file,
        }

    @field_validator("row_limit", mode="before")
    @classmethod
    def validate_row_limit(cls, v):
        """Treat 0 or an empty value as no cap"""
        if v is None or (isinstance(v, str) and v.strip() in ("", "0")) or v == 0:
            return None
        return v


class ApiSettings(BaseSettings):
    """HTTP API Configuration"""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(default=5000, description="API port")
    workers: int = Field(default=1, description="API workers")
    reload: bool = Field(default=False, description="Enable reload")

    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )

    # User listing
    users_page_size: int = Field(default=20, ge=1, description="Default page size for /api/users")
    users_max_page_size: int = Field(default=100, ge=1, description="Largest page size accepted")
    users_list_mode: str = Field(default="paginated", description="paginated or capped")
    users_list_cap: int = Field(default=100, ge=1, description="Row cap in capped mode")
    users_order_count: bool = Field(default=True, description="Annotate user summaries with order counts")

    @field_validator("users_list_mode")
    @classmethod
    def validate_list_mode(cls, v: str) -> str:
        """Validate user listing mode"""
        allowed = ["paginated", "capped"]
        if v.lower() not in allowed:
            raise ValueError(f"users_list_mode must be one of: {allowed}")
        return v.lower()


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="ecommerce-dashboard", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    etl: EtlSettings = Field(default_factory=EtlSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()

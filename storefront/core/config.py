"""Storefront Configuration"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_file="config/.env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Storefront"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Store API (catalog + orders)
    store_api_base_url: str = "http://localhost:8001"
    store_api_timeout: float = 30.0

    # Cart persistence
    cart_storage_dir: str = ".carts"
    session_max_age_hours: int = 24

    # Checkout
    concurrent_item_submission: bool = False

    @property
    def cart_storage_path(self) -> Path:
        return Path(self.cart_storage_dir)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()

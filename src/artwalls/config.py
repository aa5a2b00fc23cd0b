"""
Artwalls - Configuration and settings.

Settings are loaded from the environment (and .env) via pydantic-settings.
Nothing reads the environment at import time; use `settings` (lazy proxy)
or `get_settings()`.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings shared by the core and the CLI."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    artwalls_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""

    # Stripe
    stripe_secret_key: str = ""
    stripe_price_id_starter: str | None = None
    stripe_price_id_growth: str | None = None
    stripe_price_id_pro: str | None = None
    public_base_url: str = "https://artwalls.space"
    checkout_timeout_seconds: float = 10.0

    # Analytics
    analytics_enabled: bool = True
    analytics_batch_size: int = 20
    analytics_flush_interval_seconds: float = 5.0
    analytics_buffer_limit: int = 500

    @property
    def is_development(self) -> bool:
        return self.artwalls_env == "development"

    @property
    def is_production(self) -> bool:
        return self.artwalls_env == "production"

    def stripe_price_id(self, tier: str) -> str | None:
        """Stripe subscription price id for a paid tier, if configured."""
        return {
            "starter": self.stripe_price_id_starter,
            "growth": self.stripe_price_id_growth,
            "pro": self.stripe_price_id_pro,
        }.get(tier)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()

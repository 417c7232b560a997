"""Configuration management for the revenue reporting engine."""
from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REVENUE_",
        case_sensitive=False,
    )

    product_name: str = Field(default="STAIRS Talent Hub")
    product_prefix: str = Field(default="STAIRS")
    currency_symbol: str = Field(default="₹")

    reporting_api_url: str = Field(default="http://localhost:5000/api/admin")
    reporting_api_path: str = Field(default="/reports/revenue")
    reporting_api_timeout_seconds: float = Field(default=10.0)

    poll_interval_seconds: float = Field(default=30.0, gt=0)
    # inclusive: the Nth consecutive failed background poll is surfaced
    silent_failure_threshold: int = Field(default=3, ge=1)
    default_date_range: str = Field(default="90")

    fallback_commission_rate: Decimal = Field(default=Decimal("0.025"), ge=0)
    recent_transactions_limit: int = Field(default=20, ge=0)
    export_dir: str = Field(default=".")

    log_config_path: str | None = Field(default=None)
    log_level: str | None = Field(default=None)

    enable_metrics: bool = Field(default=True)
    enable_tracing: bool = Field(default=False)
    otel_exporter_endpoint: str | None = Field(default=None)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]

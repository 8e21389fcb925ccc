"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from pydantic_settings import BaseSettings


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "Auction Investment Tracker"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Default simulation percentages (seed new properties)
    default_itbi_percent: float = 2.0
    default_broker_percent: float = 5.0
    default_auctioneer_percent: float = 5.0
    default_down_payment_percent: float = 5.0
    default_capital_gains_percent: float = 15.0

    # Default financing parameters
    default_annual_interest_rate: float = 9.5
    default_term_months: int = 360
    default_amortization_system: str = "SAC"

    # Engine
    write_tolerance: float = 0.01
    days_per_month: float = 30.44
    sweep_row_count: int = 12

    class Config:
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

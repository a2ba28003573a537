"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./billing.db"

    # Service
    service_name: str = "billing-core"
    log_level: str = "INFO"

    # Calendar used for report buckets
    timezone: str = "Asia/Manila"
    week_start: str = "sunday"  # monday | sunday | any weekday name

    # Display
    currency_symbol: str = "₱"

    # Record numbering
    job_order_prefix: str = "JO"
    invoice_prefix: str = "INV"


settings = Settings()

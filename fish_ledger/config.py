"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./fish_ledger.db"
    create_tables_on_startup: bool = True

    # Service
    service_name: str = "fish-ledger"
    log_level: str = "INFO"
    api_prefix: str = "/api"

    # Payments against one transaction are serialized; waiting longer than this fails the request
    payment_lock_timeout_seconds: float = 5.0


settings = Settings()

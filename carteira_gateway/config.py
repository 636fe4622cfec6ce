"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./carteira.db"

    # Service
    service_name: str = "carteira-gateway"
    log_level: str = "INFO"
    timezone: str = "America/Sao_Paulo"

    # Session state
    confirmation_ttl_seconds: float = 120.0
    duplicate_message_ttl_seconds: float = 30.0

    # Wallet rules
    first_due_day: int = 5  # First installment falls on this day of next month
    low_balance_threshold_percent: float = 30.0


settings = Settings()

"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./collections_kpi.db"

    # Service
    service_name: str = "collections-kpi"
    log_level: str = "INFO"

    # Scoring
    default_salary: float = 10_000.0  # Used for collectors without a stored salary


settings = Settings()

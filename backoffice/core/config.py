"""Application configuration using Pydantic Settings."""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Back Office"
    debug: bool = False

    # Backend REST API (API_BASE_URL)
    api_base_url: str = "http://localhost:5000"
    request_timeout: float = 30.0  # seconds

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    # Reports
    report_dir: str = "reports"
    currency_label: str = "Rs."

    # Transient notifications kept per view
    notification_limit: int = 20


# Create settings instance
settings = Settings()

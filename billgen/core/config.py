"""Application settings.

Centralizes upload limits, archive options and presentation defaults so the
rest of the app can depend on a single settings object rather than scattered
env reads.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables and .env."""

    # Template upload limits
    max_template_bytes: int = 50 * 1024 * 1024
    template_load_timeout_seconds: float = 30.0

    # Archive output
    zip_compression_level: int = 6

    # Presentation
    currency_label: str = "Rs."

    log_level: str = "INFO"

    # Load variables from a local .env file when present.
    model_config = SettingsConfigDict(
        env_prefix="BILLGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


# Singleton settings instance used throughout the application.
settings = Settings()

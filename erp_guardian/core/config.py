"""
Configuration Settings.

This module defines the guardrail configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Guardrail settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Logging
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="ERP_GUARDIAN_LOG_LEVEL",
    )

    # =====================================================================
    # Pipeline
    # =====================================================================
    currency: str = Field(
        default="₽",
        description="Currency symbol used in invoice diff previews",
        alias="ERP_GUARDIAN_CURRENCY",
    )
    verification_timeout_seconds: Optional[float] = Field(
        default=10.0,
        ge=0.0,
        description="Timeout for a single verification read; 0 or unset disables it",
        alias="ERP_GUARDIAN_VERIFICATION_TIMEOUT_SECONDS",
    )
    large_invoice_threshold: float = Field(
        default=1_000_000.0,
        gt=0.0,
        description="Invoice total above which creation requires confirmation",
        alias="ERP_GUARDIAN_LARGE_INVOICE_THRESHOLD",
    )


settings = Settings()

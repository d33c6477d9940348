"""
Application configuration.

All configuration is loaded from environment variables.
A .env file in the working directory is honoured for local runs.
"""

import os
import tempfile
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Spending Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./spending_ledger.db"
    )

    # Snapshot exports land here unless the caller passes a path
    EXPORT_DIR: str = os.getenv("EXPORT_DIR", tempfile.gettempdir())

    # Money display
    CURRENCY_SYMBOL: str = os.getenv("CURRENCY_SYMBOL", "$")
    CURRENCY_CODE: str = os.getenv("CURRENCY_CODE", "USD")

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    The Settings object is created once and reused, so the
    environment is read a single time per process.
    """
    return Settings()

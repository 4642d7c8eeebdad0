"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env
file as a fallback. The .env file is gitignored; .env.example is the template.

Pydantic Settings resolves each field from:
  1. Environment variables (highest priority)
  2. The .env file
  3. The defaults defined here (lowest priority)

Usage:
    from carbon_calculator.config import settings
    print(settings.API_BASE_URL)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the Carbon Calculator client and sandbox.

    Required fields (no defaults) MUST be set in .env or environment:
      - CONSUMER_KEY: Identifies this client to the remote API
      - SIGNING_SECRET: Signs the per-request bearer tokens
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Carbon Calculator Client"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Remote API ---
    # Points at a locally running sandbox by default
    API_BASE_URL: str = "http://localhost:8000"
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # --- Request signing ---
    CONSUMER_KEY: str
    SIGNING_SECRET: str
    ALGORITHM: str = "HS256"
    REQUEST_TOKEN_EXPIRE_SECONDS: int = 300

    # --- Test data ---
    TEST_DATA_BIN: str = "545454"
    TEST_DATA_CARD_BASE_CURRENCY: str = "USD"

    # --- Sandbox ---
    SANDBOX_DATABASE_URL: str = "sqlite+aiosqlite:///./sandbox.db"
    # Fernet key for FPANs at rest; an ephemeral key is generated when unset.
    # Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    SANDBOX_CARD_ENCRYPTION_KEY: str | None = None


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()

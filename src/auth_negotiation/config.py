"""
Configuration settings for auth-negotiation.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "auth-negotiation"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    CONFIGURE_LOGGING: bool = False  # Let HttpClient install the package log handler

    # === Proxy ===
    HTTP_PROXY: Optional[str] = None  # Explicit proxy, overrides the system proxy
    HTTP_PROXY_USER: Optional[str] = None
    HTTP_PROXY_PASSWORD: Optional[str] = None

    # === Transport ===
    REQUEST_TIMEOUT: float = 100.0  # seconds, per attempt
    FOLLOW_REDIRECTS: bool = True
    MAX_REDIRECTS: int = 20
    USER_AGENT: Optional[str] = None  # Overrides the computed user agent

    # === Ambient credentials ===
    NETRC_FILE: Optional[str] = None  # None = ~/.netrc

    # === Token (STS) authentication ===
    STS_ISSUER_TIMEOUT: float = 30.0  # seconds


# Global settings instance
settings = Settings()

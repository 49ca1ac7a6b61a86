"""Configuration management for the generation core."""

from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .providers.base import MAX_TIMEOUT_SECONDS, MIN_TIMEOUT_SECONDS


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Build one instance at process start and pass it to ``build_service``;
    nothing in the package reads settings at import time.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    env: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_format: Literal["text", "json"] = "text"

    # Provider API Keys
    openai_api_key: Optional[str] = None
    openai_organization: Optional[str] = None
    google_api_key: Optional[str] = None
    cohere_api_key: Optional[str] = None
    assemblyai_api_key: Optional[str] = None

    # Fallback Policy Configuration
    policy_config_path: str = "./config/policies.yaml"
    classify_fatal_errors: bool = True  # Skip retries on auth/billing/bad-request errors
    default_timeout_seconds: float = 15.0

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level '{v}'")
        return level

    @field_validator("default_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Keep provider timeouts inside the supported 10-20 second window."""
        if not MIN_TIMEOUT_SECONDS <= v <= MAX_TIMEOUT_SECONDS:
            raise ValueError(
                f"default_timeout_seconds must be between {MIN_TIMEOUT_SECONDS} "
                f"and {MAX_TIMEOUT_SECONDS}, got {v}"
            )
        return v

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"

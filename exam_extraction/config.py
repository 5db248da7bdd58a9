"""Configuration management for the exam extraction service.

This module uses Pydantic Settings to load configuration from environment
variables. All settings are validated at startup to catch configuration
errors early.

The Gemini API key is optional here: callers may supply their own key per
request, and the pipeline raises ConfigurationError when neither is present.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Sensitive values (API keys) must be provided via environment variables
    or .env file.
    """

    # Gemini API Configuration
    gemini_api_key: Optional[str] = Field(
        default=None,
        description="Google Gemini API key used when the caller does not supply one"
    )

    # AI Model Configuration
    model_name: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model to use for extraction"
    )
    temperature: float = Field(
        default=0.1,
        description="Sampling temperature (kept near zero for reproducible JSON)"
    )
    top_k: int = Field(default=1, description="Top-k sampling parameter")
    top_p: float = Field(default=0.8, description="Top-p sampling parameter")
    max_output_tokens: int = Field(
        default=8192,
        description="Maximum number of tokens the model may return per chunk"
    )

    # Pipeline Configuration
    chunk_size: int = Field(
        default=8000,
        description="Maximum characters of document text sent per model call"
    )
    inter_chunk_delay_seconds: float = Field(
        default=1.0,
        description="Pause between consecutive chunk calls"
    )
    max_attempts: int = Field(
        default=3,
        description="How many times the whole pipeline is attempted"
    )
    retry_backoff_seconds: float = Field(
        default=2.0,
        description="Backoff unit; the pause before retry N is this value times N"
    )

    # Model configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )

    @field_validator("gemini_api_key")
    @classmethod
    def validate_gemini_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Strip the key; treat empty or whitespace-only values as unset."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("chunk_size", "max_attempts", "max_output_tokens", "top_k")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("inter_chunk_delay_seconds", "retry_backoff_seconds")
    @classmethod
    def validate_non_negative_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("delay must not be negative")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached Settings instance.

    This function uses lru_cache to ensure settings are loaded only once
    and reused across the application lifetime.

    Returns:
        Settings: Validated application settings

    Raises:
        ValueError: If environment variables are present but invalid
    """
    return Settings()

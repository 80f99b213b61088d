"""Configuration management for the Study Assistant service.

This module uses Pydantic Settings to load configuration from environment
variables. All settings are validated at startup to catch configuration
errors early.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All sensitive values (API keys, database credentials) must be
    provided via environment variables or .env file.
    """

    # Gemini API Configuration
    gemini_api_key: str = Field(
        ...,
        description="Google Gemini API key for study material analysis"
    )

    # Supabase Configuration
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anonymous key"
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key (bypasses RLS when set)"
    )

    # Firebase Storage Configuration
    firebase_service_account_json: Optional[str] = Field(
        default=None,
        description="Service account JSON string or path to JSON file"
    )
    firebase_storage_bucket: Optional[str] = Field(
        default=None,
        description="Bucket holding uploaded PDFs, e.g. my-app.firebasestorage.app"
    )

    # AI Model Configuration
    model_name: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model used to analyze study material"
    )
    ai_max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries for transient Gemini failures"
    )

    # Upload / sampling limits
    max_upload_mb: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Maximum accepted PDF size in megabytes"
    )
    max_pages_to_analyze: int = Field(
        default=5,
        ge=1,
        le=5,
        description="How many leading pages are read before sampling"
    )

    # Comma-separated proxy IPs whose X-Forwarded-For is trusted
    trusted_proxies: Optional[str] = Field(default=None)

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
    def validate_gemini_api_key(cls, v: str) -> str:
        """Validate that GEMINI_API_KEY is present and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "GEMINI_API_KEY must be set in environment variables. "
                "Get your API key from https://ai.google.dev/"
            )
        return v.strip()

    @field_validator("supabase_url")
    @classmethod
    def validate_supabase_url(cls, v: str) -> str:
        """Validate that Supabase URL is present and properly formatted."""
        if not v or not v.strip():
            raise ValueError("SUPABASE_URL must be set in environment variables")

        url = v.strip()
        if not url.startswith("https://"):
            raise ValueError(
                "SUPABASE_URL must start with https:// "
                f"(got: {url[:20]}...)"
            )

        return url

    @field_validator("supabase_key")
    @classmethod
    def validate_supabase_key(cls, v: str) -> str:
        """Validate that Supabase key is present and non-empty."""
        if not v or not v.strip():
            raise ValueError("SUPABASE_KEY must be set in environment variables")
        return v.strip()

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached Settings instance.

    Settings are loaded only once and reused across the application lifetime.

    Raises:
        ValueError: If required environment variables are missing or invalid
    """
    return Settings()

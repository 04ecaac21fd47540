"""
Configuration Management for Zenith Finance

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Nothing in the core needs configuration to run: every setting has a
default, and the Gemini key is optional because suggestions are advisory.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Durable snapshot storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path(".zenith"),
        description="Directory holding the snapshot blobs"
    )
    snapshot_key: str = Field(
        default="zenithFinanceData",
        min_length=1,
        description="Key under which the full snapshot is stored"
    )


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration for category suggestions."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key. Suggestions are disabled when unset."
    )
    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=64,
        ge=1,
        le=8192,
        description="Maximum tokens in response (a category name is short)"
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )
    timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        le=60,
        description="Give up on a suggestion after this long"
    )

    @field_validator('api_key')
    @classmethod
    def blank_key_is_none(cls, v: Optional[str]) -> Optional[str]:
        """An empty GEMINI_API_KEY means 'not configured'."""
        if v is not None and not v.strip():
            return None
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Account defaults
    default_currency_code: str = Field(
        default="USD",
        description="Currency of the profile created at signup"
    )
    default_profile_name: str = Field(
        default="Personal",
        description="Name of the profile created at signup"
    )
    reset_password: str = Field(
        default="password123",
        min_length=1,
        description="Password assigned by a password reset"
    )
    demo_email: str = Field(
        default="demo@example.com",
        description="Email of the demo account"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "gemini", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    # Suggestions are optional; report whether they can run at all
    try:
        results["gemini_configured"] = settings.gemini.api_key is not None
    except Exception:
        results["gemini_configured"] = False

    return results

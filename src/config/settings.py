"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """Shop ledger defaults."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    default_scrap_price: float = 4.20  # per kg, used when the store has no price yet
    currency_symbol: str = "R$"
    locale: str = "pt-BR"


class LLMSettings(BaseSettings):
    """Generative text provider configuration."""

    model_config = SettingsConfigDict(env_prefix="LLM_")

    provider: Literal["gemini", "ollama"] = "gemini"
    model_name: str = "gemini-2.5-flash"
    api_key: str = ""
    gemini_host: str = "https://generativelanguage.googleapis.com"
    ollama_host: str = "http://localhost:11434"
    timeout: int = 60
    max_tokens: int = 1024
    temperature: float = 0.4

    # Circuit breaker settings
    failure_threshold: int = 3
    cooldown_seconds: int = 60

    # Retry settings (1 = single attempt)
    max_retries: int = 1
    retry_delay: float = 1.0
    retry_multiplier: float = 2.0

    warmup_on_start: bool = False


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    backend: Literal["sqlite", "memory"] = "sqlite"
    data_dir: Path = Path("data")
    db_name: str = "ledger.db"

    # SQLite settings
    pool_size: int = 2
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Battery Shop Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        if settings.backend == "sqlite":
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None

"""Environment-driven configuration for the API and the LLM gateway."""

from __future__ import annotations

import os
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _default_base_dir() -> Path:
    """Data lives under APP_BASE_DIR (or BASE_DIR), else the working directory."""

    base_dir_env = os.getenv("APP_BASE_DIR") or os.getenv("BASE_DIR")
    if base_dir_env:
        return Path(base_dir_env).expanduser()
    return Path.cwd()


class AppPaths(BaseModel):
    """Resolved filesystem paths used by the application."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    base_dir: Path
    upload_dir: Path


class Settings(BaseSettings):
    """Application settings.

    Gateway options are read from ``LITELLM_*`` or ``APP_LITELLM_*`` variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=(".env",),
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="Warehouse Analyst Backend")
    app_version: str = Field(default="0.1.0")
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENVIRONMENT", "APP_ENV", "ENVIRONMENT"),
        description="Deployment environment; 'production' switches logs to JSON.",
    )
    log_level: str = Field(default="INFO", description="Root log level.")
    host: str = Field(default="0.0.0.0", description="Interface the HTTP server binds to.")
    port: int = Field(default=8000, ge=1, le=65535, description="Port the HTTP server listens on.")

    litellm_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("APP_LITELLM_BASE_URL", "LITELLM_BASE_URL"),
        description="Base URL of the LiteLLM (OpenAI-compatible) gateway.",
    )
    litellm_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("APP_LITELLM_API_KEY", "LITELLM_API_KEY"),
        description="Bearer token used to authenticate with the gateway.",
    )
    litellm_model: str = Field(
        default="gpt-4o-mini",
        validation_alias=AliasChoices("APP_LITELLM_MODEL", "LITELLM_MODEL"),
        description="Model requested from the gateway.",
    )
    litellm_timeout: float | None = Field(
        default=120.0,
        validation_alias=AliasChoices("APP_LITELLM_TIMEOUT", "LITELLM_TIMEOUT"),
        description="HTTP timeout in seconds for gateway calls.",
    )

    allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="List of origins permitted by CORS configuration.",
    )

    base_dir: Path = Field(
        default_factory=_default_base_dir,
        validation_alias=AliasChoices("APP_BASE_DIR", "BASE_DIR"),
        description="Root directory for application data.",
    )
    upload_dir: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("APP_UPLOAD_DIR", "UPLOAD_DIR"),
        description="Optional override for the upload directory location.",
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1,
        description="Maximum accepted size of a single uploaded file.",
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_allowed_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @cached_property
    def paths(self) -> AppPaths:
        base_dir = self.base_dir.expanduser().resolve()
        upload_source = self.upload_dir or (base_dir / "uploads")
        return AppPaths(
            base_dir=base_dir,
            upload_dir=Path(upload_source).expanduser().resolve(),
        )

    def ensure_directories(self) -> None:
        """Create required data directories if they do not already exist."""

        for path in {self.paths.base_dir, self.paths.upload_dir}:
            path.mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached instance of application settings."""

    return Settings()

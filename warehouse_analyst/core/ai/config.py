"""Configuration model for the LLM gateway adapter."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MODEL = "gpt-4o-mini"


class GatewaySettings(BaseModel):
    """Connection settings for an OpenAI-compatible gateway."""

    model_config = ConfigDict(frozen=True)

    base_url: str | None = Field(default=None, description="Base URL of the gateway API")
    api_key: str | None = Field(default=None, description="Bearer token used for authentication")
    model: str = Field(DEFAULT_MODEL, description="Default model identifier to invoke")
    request_timeout: float | None = Field(
        120.0,
        description="HTTP timeout in seconds; None disables the timeout",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = value.strip().rstrip("/")
        return cleaned or None

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)


__all__ = ("DEFAULT_MODEL", "GatewaySettings")

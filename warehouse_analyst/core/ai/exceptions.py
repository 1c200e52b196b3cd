"""Custom exceptions for the LLM gateway adapter."""

from __future__ import annotations


class AIServiceError(RuntimeError):
    """Base exception for AI service failures."""


class ProviderConfigurationError(AIServiceError):
    """Raised when the gateway is not correctly configured for use."""


class UnsupportedConnectionModeError(AIServiceError):
    """Raised when a live/bidirectional connection is requested."""


__all__ = (
    "AIServiceError",
    "ProviderConfigurationError",
    "UnsupportedConnectionModeError",
)

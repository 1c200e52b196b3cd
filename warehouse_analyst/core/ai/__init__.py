"""LLM gateway adapter and supporting types."""

from __future__ import annotations

from .config import GatewaySettings
from .diagnostics import DiagnosticEvent, Diagnostics, LoggingDiagnostics, NullDiagnostics
from .exceptions import AIServiceError, ProviderConfigurationError, UnsupportedConnectionModeError
from .providers import LiteLlmAdapter, ResponseStream
from .service import collect_text, create_llm_adapter, get_llm_adapter
from .types import (
    ConversationTurn,
    FunctionCallPart,
    GenerationConfig,
    InlineMediaPart,
    LlmRequest,
    LlmResponse,
    ResponseContent,
    TextPart,
)

__all__ = (
    "AIServiceError",
    "ConversationTurn",
    "DiagnosticEvent",
    "Diagnostics",
    "FunctionCallPart",
    "GatewaySettings",
    "GenerationConfig",
    "InlineMediaPart",
    "LiteLlmAdapter",
    "LlmRequest",
    "LlmResponse",
    "LoggingDiagnostics",
    "NullDiagnostics",
    "ProviderConfigurationError",
    "ResponseContent",
    "ResponseStream",
    "TextPart",
    "UnsupportedConnectionModeError",
    "collect_text",
    "create_llm_adapter",
    "get_llm_adapter",
)

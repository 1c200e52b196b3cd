"""Adapter construction and response consumption helpers."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable
from functools import lru_cache

from ..settings import Settings, get_settings
from .config import GatewaySettings
from .exceptions import ProviderConfigurationError
from .providers.litellm import LiteLlmAdapter
from .types import LlmResponse

logger = logging.getLogger(__name__)


def build_gateway_settings(settings: Settings) -> GatewaySettings:
    return GatewaySettings(
        base_url=settings.litellm_base_url,
        api_key=settings.litellm_api_key,
        model=settings.litellm_model,
        request_timeout=settings.litellm_timeout,
    )


def create_llm_adapter(settings: Settings) -> LiteLlmAdapter:
    """Build an adapter from application settings.

    Raises :class:`ProviderConfigurationError` when the gateway is not configured.
    """

    gateway = build_gateway_settings(settings)
    if not gateway.is_configured:
        raise ProviderConfigurationError(
            "LiteLLM gateway is not configured; set LITELLM_BASE_URL and LITELLM_API_KEY"
        )
    logger.info(
        "llm.adapter.created",
        extra={
            "log_type": "SYSTEM",
            "metadata": {"base_url": gateway.base_url, "model": gateway.model},
        },
    )
    return LiteLlmAdapter(gateway)


@lru_cache()
def get_llm_adapter() -> LiteLlmAdapter:
    """Return a cached adapter built from the cached application settings."""

    return create_llm_adapter(get_settings())


async def collect_text(responses: AsyncIterable[LlmResponse]) -> str:
    """Reduce a response sequence to the text shown to the end user.

    The last complete (non-partial) text wins; otherwise streamed fragments are
    joined. An error response ends the sequence and contributes its diagnostic.
    """

    fragments: list[str] = []
    final_text: str | None = None
    async for response in responses:
        if response.is_error:
            return response.text()
        text = response.text()
        if response.partial:
            fragments.append(text)
        elif text:
            final_text = text
    if final_text is not None:
        return final_text
    return "".join(fragments)


__all__ = (
    "build_gateway_settings",
    "collect_text",
    "create_llm_adapter",
    "get_llm_adapter",
)

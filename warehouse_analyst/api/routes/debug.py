"""Diagnostic endpoint exercising the LLM gateway end to end."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ...core.ai import ConversationTurn, LiteLlmAdapter, LlmRequest, ProviderConfigurationError, TextPart
from ...core.ai.providers.litellm import build_payload_preview
from ...models.analysis import FunctionCallInfo, GatewayTestResponse
from ...models.common import ResponseEnvelope
from ..responses import error_response
from .analysis import get_adapter_factory

router = APIRouter(prefix="/debug", tags=["debug"])

TEST_MESSAGE = "Test message from debug endpoint"


@router.post(
    "/test-llm",
    response_model=ResponseEnvelope[GatewayTestResponse],
    summary="Send a fixed test message through the LLM gateway",
)
async def test_llm(
    adapter_factory: Callable[[], LiteLlmAdapter] = Depends(get_adapter_factory),
) -> ResponseEnvelope[GatewayTestResponse] | JSONResponse:
    try:
        adapter = adapter_factory()
    except ProviderConfigurationError as exc:
        return error_response(status.HTTP_400_BAD_REQUEST, "provider_not_configured", str(exc))

    request = LlmRequest(contents=(ConversationTurn.of("user", TextPart(TEST_MESSAGE)),))
    responses = await adapter.invoke(request).collect()
    final = responses[-1]

    payload = GatewayTestResponse(
        base_url=adapter.base_url,
        model=adapter.model,
        request_preview=dict(build_payload_preview(request, model=adapter.model)),
        text=final.text(),
        function_calls=[
            FunctionCallInfo(name=call.name, args=dict(call.args)) for call in final.function_calls()
        ],
        finish_reason=final.finish_reason,
        error_code=final.error_code,
        error_message=final.error_message,
    )
    return ResponseEnvelope.success_payload(payload)

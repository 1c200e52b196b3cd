"""Adapter routing generic LLM requests to a LiteLLM (OpenAI-compatible) gateway."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterator, Mapping
from contextlib import aclosing
from typing import Any

import httpx

from ..boundary import http_error_response, transport_error_response
from ..config import GatewaySettings
from ..diagnostics import DiagnosticEvent, Diagnostics, LoggingDiagnostics
from ..exceptions import ProviderConfigurationError, UnsupportedConnectionModeError
from ..normalizer import message_from_body, normalize
from ..streaming import iter_stream_deltas
from ..translator import redact_payload, translate_request
from ..types import LlmRequest, LlmResponse
from .base import CHAT_COMPLETIONS_PATH, AttemptPolicy, GatewayTransport

logger = logging.getLogger(__name__)


class ResponseStream(AsyncIterator[LlmResponse]):
    """Lazily produced sequence of responses for a single adapter invocation.

    Nothing is sent until the first item is requested. Closing the stream
    before it is exhausted closes the underlying HTTP response.
    """

    def __init__(self, generator: AsyncGenerator[LlmResponse, None]) -> None:
        self._generator = generator
        self._closed = False

    def __aiter__(self) -> "ResponseStream":
        return self

    async def __anext__(self) -> LlmResponse:
        if self._closed:
            raise StopAsyncIteration
        try:
            return await self._generator.__anext__()
        except StopAsyncIteration:
            self._closed = True
            raise

    async def __aenter__(self) -> "ResponseStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._generator.aclose()

    async def collect(self) -> list[LlmResponse]:
        """Drain the stream into a list."""

        async with self:
            return [response async for response in self]


class LiteLlmAdapter:
    """Translate generic requests to chat-completions calls and back."""

    def __init__(
        self,
        settings: GatewaySettings,
        *,
        diagnostics: Diagnostics | None = None,
        policy: AttemptPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not settings.base_url:
            raise ProviderConfigurationError("LiteLLM base URL is not configured")
        if not settings.api_key:
            raise ProviderConfigurationError("LiteLLM API key is not configured")

        self._settings = settings
        self._diagnostics = diagnostics or LoggingDiagnostics()
        self._transport = GatewayTransport(
            base_url=settings.base_url,
            api_key=settings.api_key,
            timeout=settings.request_timeout,
            policy=policy,
            transport=transport,
        )

    @property
    def model(self) -> str:
        return self._settings.model

    @property
    def base_url(self) -> str:
        return self._settings.base_url or ""

    async def __aenter__(self) -> "LiteLlmAdapter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""

        await self._transport.aclose()

    def invoke(
        self,
        request: LlmRequest,
        model: str | None = None,
        stream: bool = False,
    ) -> ResponseStream:
        """Return the lazily produced responses for *request*.

        Failures are reported as a single terminal error response instead of
        being raised.
        """

        return ResponseStream(self._generate(request, model or self.model, stream))

    def connect(self) -> None:
        raise UnsupportedConnectionModeError(
            "LiteLlmAdapter does not support live/bidirectional connections."
        )

    async def _generate(
        self, request: LlmRequest, model: str, stream: bool
    ) -> AsyncGenerator[LlmResponse, None]:
        """Yield the responses for one gateway call.

        Streamed partials are handed out as they arrive, so a read that fails
        part way through ends with an error response after the partials that
        were already yielded.
        """

        try:
            payload = translate_request(request, model=model, stream=stream).to_payload()
            self._record(
                "llm.request",
                url=f"{self.base_url}{CHAT_COMPLETIONS_PATH}",
                model=model,
                stream=stream,
                body=redact_payload(payload),
            )
            async with self._transport.open(payload) as response:
                if not response.is_success:
                    await response.aread()
                    body = response.text
                    self._record("llm.http_error", status_code=response.status_code, body=body)
                    yield http_error_response(response.status_code, body)
                    return

                if stream:
                    deltas = iter_stream_deltas(response.aiter_text(), on_skip=self._frame_skipped)
                    async with aclosing(deltas):
                        async for delta in deltas:
                            for item in normalize(delta):
                                yield item
                    self._record("llm.response", model=model, stream=True)
                else:
                    await response.aread()
                    body = response.json()
                    self._record("llm.response", model=model, stream=False, body=body)
                    for item in normalize(message_from_body(body)):
                        yield item
        except Exception as exc:
            self._record("llm.transport_error", error=str(exc), error_type=type(exc).__name__)
            yield transport_error_response(exc)

    def _frame_skipped(self, payload: str) -> None:
        self._record("llm.frame_skipped", payload=payload[:200])

    def _record(self, name: str, **fields: Any) -> None:
        event = DiagnosticEvent(name=name, fields=fields)
        try:
            self._diagnostics.record(event)
        except Exception:
            logger.warning("Diagnostics hook failed for %s", name, exc_info=True)


def build_payload_preview(request: LlmRequest, *, model: str, stream: bool = False) -> Mapping[str, Any]:
    """Return the redacted wire body that :meth:`LiteLlmAdapter.invoke` would send."""

    return redact_payload(translate_request(request, model=model, stream=stream).to_payload())


__all__ = ("LiteLlmAdapter", "ResponseStream", "build_payload_preview")

"""Tests for the LiteLLM adapter against a mocked gateway."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from conftest import GATEWAY_KEY, byte_chunks, completion_body, make_adapter, sse_frames
from warehouse_analyst.core.ai import (
    ConversationTurn,
    GatewaySettings,
    GenerationConfig,
    InlineMediaPart,
    LiteLlmAdapter,
    LlmRequest,
    NullDiagnostics,
    ProviderConfigurationError,
    TextPart,
    UnsupportedConnectionModeError,
    collect_text,
)
from warehouse_analyst.core.ai.diagnostics import DiagnosticEvent, RecordingDiagnostics
from warehouse_analyst.core.ai.providers import SingleAttemptPolicy


def _request(text: str = "hello", **config: Any) -> LlmRequest:
    return LlmRequest(
        contents=(ConversationTurn.of("user", TextPart(text)),),
        config=GenerationConfig(**config),
    )


def _delta(content: str) -> dict[str, Any]:
    return {"choices": [{"delta": {"content": content}}]}


class CapturingPolicy(SingleAttemptPolicy):
    def __init__(self) -> None:
        self.responses: list[httpx.Response] = []

    async def send(self, client: httpx.AsyncClient, request: httpx.Request) -> httpx.Response:
        response = await super().send(client, request)
        self.responses.append(response)
        return response


class ExplodingDiagnostics:
    def record(self, event: DiagnosticEvent) -> None:
        raise RuntimeError("diagnostics sink is down")


@pytest.mark.asyncio
async def test_non_streaming_call_sends_expected_request() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(status_code=200, json=completion_body("hi there"))

    async with make_adapter(handler, base_url="https://gateway.test/v1/", model="gpt-mock") as adapter:
        responses = await adapter.invoke(_request(temperature=0.3)).collect()

    assert len(responses) == 1
    assert responses[0].text() == "hi there"
    assert responses[0].partial is False
    assert responses[0].turn_complete is True

    [request] = captured
    assert request.method == "POST"
    assert str(request.url) == "https://gateway.test/v1/chat/completions"
    assert request.headers["authorization"] == f"Bearer {GATEWAY_KEY}"
    assert request.headers["content-type"] == "application/json"
    payload = json.loads(request.content)
    assert payload == {
        "model": "gpt-mock",
        "messages": [{"role": "user", "content": "hello"}],
        "stream": False,
        "temperature": 0.3,
    }


@pytest.mark.asyncio
async def test_model_argument_overrides_configured_model() -> None:
    models: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        models.append(json.loads(request.content)["model"])
        return httpx.Response(status_code=200, json=completion_body())

    async with make_adapter(handler, diagnostics=NullDiagnostics()) as adapter:
        await adapter.invoke(_request(), model="claude-mock").collect()

    assert models == ["claude-mock"]


@pytest.mark.asyncio
async def test_invoke_is_lazy() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status_code=200, json=completion_body())

    async with make_adapter(handler) as adapter:
        stream = adapter.invoke(_request())
        assert calls == []
        await stream.aclose()

    assert calls == []


@pytest.mark.asyncio
async def test_http_error_yields_single_error_response() -> None:
    diagnostics = RecordingDiagnostics()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=503, text="service unavailable")

    async with make_adapter(handler, diagnostics=diagnostics) as adapter:
        responses = await adapter.invoke(_request()).collect()

    [response] = responses
    assert response.error_code == "LITELLM_503"
    assert response.error_message == "service unavailable"
    assert response.content is None
    assert response.turn_complete is True
    assert "[LiteLLM Error 503]" in response.text()
    assert "service unavailable" in response.text()
    assert diagnostics.names() == ["llm.request", "llm.http_error"]


@pytest.mark.asyncio
async def test_transport_failure_yields_error_response() -> None:
    diagnostics = RecordingDiagnostics()

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with make_adapter(handler, diagnostics=diagnostics) as adapter:
        responses = await adapter.invoke(_request()).collect()

    [response] = responses
    assert response.error_code == "LITELLM_ERROR"
    assert response.error_message == "connection refused"
    assert response.content is None
    assert diagnostics.names()[-1] == "llm.transport_error"


@pytest.mark.asyncio
async def test_invalid_json_body_is_reported_as_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, text="<html>gateway</html>")

    async with make_adapter(handler) as adapter:
        [response] = await adapter.invoke(_request()).collect()

    assert response.error_code == "LITELLM_ERROR"
    assert response.content is None
    assert "request to the LiteLLM gateway failed" in response.text()
    assert "could not be reached" not in response.text()


@pytest.mark.asyncio
async def test_streaming_yields_partials_in_order() -> None:
    body = sse_frames(_delta("Hel"), _delta("lo"))
    chunks = [body[:30], body[30:71], body[71:]]
    sent: list[dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return httpx.Response(status_code=200, content=byte_chunks(chunks))

    async with make_adapter(handler) as adapter:
        responses = await adapter.invoke(_request(), stream=True).collect()

    assert sent[0]["stream"] is True
    assert [response.text() for response in responses] == ["Hel", "lo"]
    assert all(response.partial for response in responses)


@pytest.mark.asyncio
async def test_streaming_stops_at_done_marker() -> None:
    body = sse_frames(_delta("a")) + sse_frames(_delta("after"), done=False)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, content=byte_chunks([body]))

    async with make_adapter(handler) as adapter:
        responses = await adapter.invoke(_request(), stream=True).collect()

    assert [response.text() for response in responses] == ["a"]


@pytest.mark.asyncio
async def test_streaming_skips_malformed_frames() -> None:
    diagnostics = RecordingDiagnostics()
    body = b"data: {broken\n\n" + sse_frames(_delta("fine"))

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, content=byte_chunks([body]))

    async with make_adapter(handler, diagnostics=diagnostics) as adapter:
        responses = await adapter.invoke(_request(), stream=True).collect()

    assert [response.text() for response in responses] == ["fine"]
    assert "llm.frame_skipped" in diagnostics.names()


@pytest.mark.asyncio
async def test_streaming_survives_deeply_nested_frame() -> None:
    body = sse_frames(_delta("a"), done=False) + b"data: " + b"[" * 200000 + b"\n\n" + sse_frames(_delta("b"))

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, content=byte_chunks([body]))

    async with make_adapter(handler) as adapter:
        responses = await adapter.invoke(_request(), stream=True).collect()

    assert [response.text() for response in responses] == ["a", "b"]
    assert all(response.error_code is None for response in responses)


@pytest.mark.asyncio
async def test_streamed_tool_call_yields_final_function_call_response() -> None:
    event = {
        "choices": [
            {"delta": {"tool_calls": [{"function": {"name": "lookup", "arguments": '{"x": 1}'}}]}}
        ]
    }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, content=byte_chunks([sse_frames(event)]))

    async with make_adapter(handler) as adapter:
        [response] = await adapter.invoke(_request(), stream=True).collect()

    assert response.partial is False
    assert response.turn_complete is True
    assert response.function_calls()[0].name == "lookup"
    assert response.function_calls()[0].args == {"x": 1}


@pytest.mark.asyncio
async def test_mid_stream_failure_follows_earlier_partials() -> None:
    async def failing_body():
        yield sse_frames(_delta("Hel"), done=False)
        raise httpx.ReadError("connection reset")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, content=failing_body())

    async with make_adapter(handler) as adapter:
        responses = await adapter.invoke(_request(), stream=True).collect()

    assert [response.error_code for response in responses] == [None, "LITELLM_ERROR"]
    assert responses[0].text() == "Hel"
    assert responses[1].content is None


@pytest.mark.asyncio
async def test_closing_stream_early_closes_http_response() -> None:
    policy = CapturingPolicy()
    body = sse_frames(_delta("one"), _delta("two"), _delta("three"))

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, content=byte_chunks([body]))

    adapter = LiteLlmAdapter(
        GatewaySettings(base_url="https://gateway.test", api_key=GATEWAY_KEY),
        diagnostics=RecordingDiagnostics(),
        policy=policy,
        transport=httpx.MockTransport(handler),
    )
    async with adapter:
        stream = adapter.invoke(_request(), stream=True)
        first = await stream.__anext__()
        assert first.text() == "one"
        assert policy.responses[0].is_closed is False

        await stream.aclose()

        assert stream.closed is True
        assert policy.responses[0].is_closed is True
        assert [response async for response in stream] == []


@pytest.mark.asyncio
async def test_diagnostics_failures_do_not_change_results() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json=completion_body("still fine"))

    async with make_adapter(handler, diagnostics=ExplodingDiagnostics()) as adapter:
        responses = await adapter.invoke(_request()).collect()

    assert [response.text() for response in responses] == ["still fine"]


@pytest.mark.asyncio
async def test_request_diagnostic_redacts_inline_media() -> None:
    diagnostics = RecordingDiagnostics()
    image = "A" * 400

    def handler(request: httpx.Request) -> httpx.Response:
        sent_url = json.loads(request.content)["messages"][0]["content"][1]["image_url"]["url"]
        assert sent_url == f"data:image/png;base64,{image}"
        return httpx.Response(status_code=200, json=completion_body())

    request = LlmRequest(
        contents=(ConversationTurn.of("user", TextPart("look"), InlineMediaPart("image/png", image)),)
    )
    async with make_adapter(handler, diagnostics=diagnostics) as adapter:
        await adapter.invoke(request).collect()

    logged = diagnostics.events[0]
    assert logged.name == "llm.request"
    logged_url = logged.fields["body"]["messages"][0]["content"][1]["image_url"]["url"]
    assert logged_url.endswith("...[truncated]")
    assert len(logged_url) == 50 + len("...[truncated]")


@pytest.mark.asyncio
async def test_no_response_mixes_content_and_error() -> None:
    bodies = iter(
        [
            httpx.Response(status_code=200, json=completion_body("ok")),
            httpx.Response(status_code=500, text="boom"),
            httpx.Response(status_code=200, content=byte_chunks([sse_frames(_delta("x"))])),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return next(bodies)

    async with make_adapter(handler) as adapter:
        responses = [
            *await adapter.invoke(_request()).collect(),
            *await adapter.invoke(_request()).collect(),
            *await adapter.invoke(_request(), stream=True).collect(),
        ]

    assert len(responses) == 3
    for response in responses:
        assert response.error_code is None or response.content is None


@pytest.mark.asyncio
async def test_collect_text_prefers_diagnostic_for_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=401, text="invalid key")

    async with make_adapter(handler) as adapter:
        text = await collect_text(adapter.invoke(_request()))

    assert text.startswith("[LiteLLM Error 401]")
    assert "invalid key" in text


@pytest.mark.asyncio
async def test_collect_text_joins_streamed_fragments() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = sse_frames(_delta("Hel"), _delta("lo"))
        return httpx.Response(status_code=200, content=byte_chunks([body]))

    async with make_adapter(handler) as adapter:
        assert await collect_text(adapter.invoke(_request(), stream=True)) == "Hello"


def test_connect_is_not_supported() -> None:
    adapter = LiteLlmAdapter(GatewaySettings(base_url="https://gateway.test", api_key="k"))

    with pytest.raises(UnsupportedConnectionModeError):
        adapter.connect()


@pytest.mark.parametrize(
    "settings",
    [
        GatewaySettings(base_url=None, api_key="k"),
        GatewaySettings(base_url="https://gateway.test", api_key=None),
        GatewaySettings(base_url="   ", api_key="k"),
    ],
)
def test_missing_configuration_is_rejected(settings: GatewaySettings) -> None:
    with pytest.raises(ProviderConfigurationError):
        LiteLlmAdapter(settings)

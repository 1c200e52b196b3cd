from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable, Iterable
from pathlib import Path
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

import warehouse_analyst.core.ai.service as ai_service_module
import warehouse_analyst.core.settings as settings_module
from warehouse_analyst.core.ai import GatewaySettings, LiteLlmAdapter
from warehouse_analyst.core.ai.diagnostics import RecordingDiagnostics

GATEWAY_URL = "https://gateway.test/v1"
GATEWAY_KEY = "test-key"

_ISOLATED_ENV = (
    "LITELLM_BASE_URL",
    "LITELLM_API_KEY",
    "LITELLM_MODEL",
    "APP_LITELLM_BASE_URL",
    "APP_LITELLM_API_KEY",
    "APP_LITELLM_MODEL",
    "LITELLM_TIMEOUT",
    "APP_LITELLM_TIMEOUT",
    "APP_MAX_UPLOAD_BYTES",
    "APP_ALLOWED_ORIGINS",
    "APP_HOST",
    "APP_PORT",
)


def completion_body(content: str | None = "ok", **choice: Any) -> dict[str, Any]:
    choice.setdefault("finish_reason", "stop")
    return {"choices": [{"message": {"role": "assistant", "content": content}, **choice}]}


def sse_frames(*events: Any, done: bool = True) -> bytes:
    lines = [f"data: {json.dumps(event)}\n\n" for event in events]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


async def byte_chunks(chunks: Iterable[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


def make_adapter(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    diagnostics: Any = None,
    **settings: Any,
) -> LiteLlmAdapter:
    settings.setdefault("base_url", GATEWAY_URL)
    settings.setdefault("api_key", GATEWAY_KEY)
    return LiteLlmAdapter(
        GatewaySettings(**settings),
        diagnostics=diagnostics if diagnostics is not None else RecordingDiagnostics(),
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture()
def runtime_environment(tmp_path, monkeypatch) -> Path:
    base_dir = tmp_path / "runtime"
    monkeypatch.setenv("APP_BASE_DIR", str(base_dir))
    monkeypatch.delenv("APP_UPLOAD_DIR", raising=False)
    monkeypatch.delenv("UPLOAD_DIR", raising=False)
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
    return base_dir


@pytest.fixture()
def client_factory(runtime_environment: Path):
    clients: list[TestClient] = []

    def factory(adapter_factory: Callable[[], LiteLlmAdapter] | None = None) -> TestClient:
        settings_module.get_settings.cache_clear()
        ai_service_module.get_llm_adapter.cache_clear()

        from warehouse_analyst.api.routes.analysis import get_adapter_factory
        from warehouse_analyst.main import create_application

        application = create_application()
        if adapter_factory is not None:
            application.dependency_overrides[get_adapter_factory] = lambda: adapter_factory
        test_client = TestClient(application)
        test_client.__enter__()
        clients.append(test_client)
        return test_client

    yield factory

    for test_client in clients:
        test_client.__exit__(None, None, None)
    settings_module.get_settings.cache_clear()
    ai_service_module.get_llm_adapter.cache_clear()


@pytest.fixture()
def client(client_factory) -> TestClient:
    return client_factory()

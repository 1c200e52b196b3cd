"""Shared HTTP transport for chat-completions gateways."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any, Protocol

import httpx

CHAT_COMPLETIONS_PATH = "/chat/completions"


class AttemptPolicy(Protocol):
    """Decides how a prepared request is sent to the gateway."""

    async def send(self, client: httpx.AsyncClient, request: httpx.Request) -> httpx.Response:
        """Send *request* and return the (streamed) response."""


class SingleAttemptPolicy:
    """Send every request exactly once, without retries or backoff."""

    async def send(self, client: httpx.AsyncClient, request: httpx.Request) -> httpx.Response:
        return await client.send(request, stream=True)


class GatewayTransport:
    """HTTP transport issuing chat-completions requests to a gateway."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout: float | None = None,
        policy: AttemptPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        self._policy = policy or SingleAttemptPolicy()
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    @asynccontextmanager
    async def open(self, payload: Mapping[str, Any]) -> AsyncIterator[httpx.Response]:
        """POST *payload* and yield the response with its body still unread.

        The response is closed when the context exits, including when the
        consumer abandons it early.
        """

        request = self._client.build_request("POST", CHAT_COMPLETIONS_PATH, json=dict(payload))
        response = await self._policy.send(self._client, request)
        try:
            yield response
        finally:
            await response.aclose()


__all__ = (
    "AttemptPolicy",
    "CHAT_COMPLETIONS_PATH",
    "GatewayTransport",
    "SingleAttemptPolicy",
)

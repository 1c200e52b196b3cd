"""Incremental parsing of chat-completions event streams.

The gateway answers streaming requests with ``data: <json>`` lines terminated
by ``data: [DONE]``. Lines may be split across network chunks, so decoded text
is fed through :class:`SSELineBuffer`, which only releases complete lines.
Frames whose payload is not valid JSON are skipped; proxies are known to
inject keep-alive lines into the stream.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable, Mapping
from contextlib import aclosing
from typing import Any

from .types import StreamDelta

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_MARKER = "[DONE]"


class SSELineBuffer:
    """Reassemble newline-delimited lines from arbitrarily split text chunks."""

    def __init__(self) -> None:
        self._buffer = ""

    @property
    def pending(self) -> str:
        return self._buffer

    def feed(self, text: str) -> list[str]:
        """Append *text* and return every line completed by it."""

        if not text:
            return []
        lines = (self._buffer + text).split("\n")
        self._buffer = lines.pop()
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> list[str]:
        """Return the trailing unterminated line, if any, and reset the buffer."""

        remainder, self._buffer = self._buffer, ""
        remainder = remainder.rstrip("\r")
        return [remainder] if remainder else []


def event_payload(line: str) -> str | None:
    """Return the data payload of an event line, or ``None`` for other lines."""

    if not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX):]


def decode_delta(payload: str) -> StreamDelta | None:
    """Decode one event payload into a :class:`StreamDelta`.

    Returns ``None`` when the payload is not JSON or nests too deeply to decode.
    """

    try:
        parsed = json.loads(payload)
    except (ValueError, RecursionError):
        return None
    return delta_from_event(parsed)


def delta_from_event(event: Any) -> StreamDelta:
    delta = _first_choice(event).get("delta")
    if not isinstance(delta, Mapping):
        return StreamDelta()
    content = delta.get("content")
    tool_calls = delta.get("tool_calls")
    return StreamDelta(
        content=content if isinstance(content, str) else None,
        tool_calls=tool_calls if isinstance(tool_calls, list) else None,
    )


def _first_choice(event: Any) -> Mapping[str, Any]:
    if not isinstance(event, Mapping):
        return {}
    choices = event.get("choices")
    if not isinstance(choices, list) or not choices:
        return {}
    choice = choices[0]
    return choice if isinstance(choice, Mapping) else {}


async def iter_lines(chunks: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yield complete lines from *chunks*, including a trailing unterminated one."""

    buffer = SSELineBuffer()
    async for chunk in chunks:
        for line in buffer.feed(chunk):
            yield line
    for line in buffer.flush():
        yield line


async def iter_stream_deltas(
    chunks: AsyncIterable[str],
    *,
    on_skip: Callable[[str], None] | None = None,
) -> AsyncIterator[StreamDelta]:
    """Yield stream deltas in arrival order until ``[DONE]`` or end of body."""

    async with aclosing(iter_lines(chunks)) as lines:
        async for line in lines:
            payload = event_payload(line)
            if payload is None:
                continue
            if payload == DONE_MARKER:
                return
            delta = decode_delta(payload)
            if delta is None:
                logger.debug("Skipping malformed stream frame: %.200s", payload)
                if on_skip is not None:
                    on_skip(payload)
                continue
            yield delta


__all__ = (
    "DATA_PREFIX",
    "DONE_MARKER",
    "SSELineBuffer",
    "decode_delta",
    "delta_from_event",
    "event_payload",
    "iter_lines",
    "iter_stream_deltas",
)

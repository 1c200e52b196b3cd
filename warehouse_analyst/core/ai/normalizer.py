"""Convert gateway messages into generic :class:`LlmResponse` objects."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .types import (
    CompleteMessage,
    FunctionCallPart,
    GatewayMessage,
    LlmResponse,
    ResponseContent,
    ResponsePart,
    StreamDelta,
    TextPart,
)

logger = logging.getLogger(__name__)


def message_from_body(body: Any) -> CompleteMessage:
    """Extract the assistant message from a complete response body.

    Reads ``choices[0].message``, falling back to ``choices[0].delta`` and then
    to the top-level object.
    """

    if not isinstance(body, Mapping):
        raise ValueError("response body must be a JSON object")

    choice: Mapping[str, Any] = {}
    choices = body.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], Mapping):
        choice = choices[0]

    message = choice.get("message") or choice.get("delta") or body
    if not isinstance(message, Mapping):
        message = body

    content = message.get("content") or body.get("content")
    tool_calls = message.get("tool_calls")
    finish_reason = choice.get("finish_reason")
    return CompleteMessage(
        content=content if isinstance(content, str) else None,
        tool_calls=tool_calls if isinstance(tool_calls, list) else None,
        finish_reason=finish_reason if isinstance(finish_reason, str) else None,
        finish_reason_null="finish_reason" in choice and choice["finish_reason"] is None,
    )


def normalize(message: GatewayMessage) -> list[LlmResponse]:
    """Normalise a gateway message into the responses handed to the caller."""

    match message:
        case CompleteMessage():
            return [normalize_message(message)]
        case StreamDelta():
            return normalize_delta(message)


def normalize_message(message: CompleteMessage) -> LlmResponse:
    parts: list[ResponsePart] = []
    if message.content:
        parts.append(TextPart(message.content))
    parts.extend(function_call_parts(message.tool_calls))
    return LlmResponse(
        content=_content(parts),
        partial=False,
        # Only an explicit null finish_reason leaves the turn open.
        turn_complete=not message.finish_reason_null,
        finish_reason=message.finish_reason,
    )


def normalize_delta(delta: StreamDelta) -> list[LlmResponse]:
    responses: list[LlmResponse] = []
    if delta.content:
        responses.append(
            LlmResponse(content=_content([TextPart(delta.content)]), partial=True)
        )
    if delta.tool_calls is not None:
        parts = function_call_parts(delta.tool_calls)
        responses.append(
            LlmResponse(content=_content(parts), partial=False, turn_complete=True)
        )
    return responses


def function_call_parts(tool_calls: Sequence[Any] | None) -> list[FunctionCallPart]:
    """Build function-call parts, degrading malformed arguments to ``{}``."""

    parts: list[FunctionCallPart] = []
    for tool_call in tool_calls or ():
        function = tool_call.get("function") if isinstance(tool_call, Mapping) else None
        if not isinstance(function, Mapping):
            continue
        name = function.get("name")
        parts.append(
            FunctionCallPart(
                name=name if isinstance(name, str) else "",
                args=_decode_arguments(function.get("arguments")),
            )
        )
    return parts


def _decode_arguments(raw: Any) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)
    if not isinstance(raw, str) or not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except (ValueError, RecursionError):
        logger.debug("Tool call arguments are not valid JSON: %.200s", raw)
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _content(parts: Sequence[ResponsePart]) -> ResponseContent | None:
    if not parts:
        return None
    return ResponseContent(parts=tuple(parts))


__all__ = (
    "function_call_parts",
    "message_from_body",
    "normalize",
    "normalize_delta",
    "normalize_message",
)

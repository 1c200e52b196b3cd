"""Translate generic conversations into chat-completions request bodies."""

from __future__ import annotations

import copy
from typing import Any, Mapping

from .types import (
    ConversationTurn,
    InlineMediaPart,
    LlmRequest,
    MultimodalContent,
    TextOnlyContent,
    TextPart,
    WireContent,
    WireMessage,
    WireRequest,
)

_ROLE_MAP = {"model": "assistant"}
_REDACTED_PREFIX_LENGTH = 50
_REDACTED_MARKER = "...[truncated]"


def translate_request(request: LlmRequest, *, model: str, stream: bool) -> WireRequest:
    """Build the wire request for *request* addressed to *model*."""

    config = request.config
    return WireRequest(
        model=model,
        messages=tuple(translate_turn(turn) for turn in request.contents),
        stream=stream,
        temperature=config.temperature,
        max_tokens=config.max_output_tokens,
    )


def translate_turn(turn: ConversationTurn) -> WireMessage:
    return WireMessage(role=map_role(turn.role), content=_translate_content(turn))


def map_role(role: str) -> str:
    return _ROLE_MAP.get(role, role)


def _translate_content(turn: ConversationTurn) -> WireContent:
    texts = [part.text for part in turn.parts if isinstance(part, TextPart) and part.text]
    media = [part for part in turn.parts if isinstance(part, InlineMediaPart)]

    if not media:
        return TextOnlyContent("\n".join(texts))

    blocks: list[Mapping[str, Any]] = [{"type": "text", "text": text} for text in texts]
    blocks.extend(
        {"type": "image_url", "image_url": {"url": data_url(part)}} for part in media
    )
    return MultimodalContent(tuple(blocks))


def data_url(part: InlineMediaPart) -> str:
    return f"data:{part.mime_type};base64,{part.data}"


def redact_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of *payload* with inline image data truncated for logging."""

    redacted = copy.deepcopy(dict(payload))
    for message in redacted.get("messages") or []:
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, list):
            continue
        for block in content:
            if not isinstance(block, dict) or block.get("type") != "image_url":
                continue
            image_url = block.get("image_url")
            if isinstance(image_url, dict) and isinstance(image_url.get("url"), str):
                image_url["url"] = image_url["url"][:_REDACTED_PREFIX_LENGTH] + _REDACTED_MARKER
    return redacted


__all__ = ("data_url", "map_role", "redact_payload", "translate_request", "translate_turn")

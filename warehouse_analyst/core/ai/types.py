"""Common types for the LLM gateway adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Sequence


@dataclass(frozen=True, slots=True)
class TextPart:
    """Plain text fragment of a conversation turn."""

    text: str


@dataclass(frozen=True, slots=True)
class InlineMediaPart:
    """Binary media carried inline as a base64 string."""

    mime_type: str
    data: str


@dataclass(frozen=True, slots=True)
class FunctionCallPart:
    """Function invocation requested by the model."""

    name: str
    args: Mapping[str, Any] = field(default_factory=dict)


Part = TextPart | InlineMediaPart
ResponsePart = TextPart | FunctionCallPart


@dataclass(frozen=True, slots=True)
class ConversationTurn:
    """A single turn of a multi-part conversation."""

    role: str
    parts: tuple[Part, ...] = ()

    @classmethod
    def of(cls, role: str, *parts: Part) -> "ConversationTurn":
        return cls(role=role, parts=tuple(parts))


@dataclass(frozen=True, slots=True)
class GenerationConfig:
    """Optional sampling parameters supplied by the caller."""

    temperature: float | None = None
    max_output_tokens: int | None = None


@dataclass(frozen=True, slots=True)
class LlmRequest:
    """Generic multi-turn request handed to the adapter."""

    contents: tuple[ConversationTurn, ...]
    config: GenerationConfig = field(default_factory=GenerationConfig)

    def __post_init__(self) -> None:
        if not self.contents:
            raise ValueError("LLM requests require at least one conversation turn")


@dataclass(frozen=True, slots=True)
class ResponseContent:
    """Content block of a generic response."""

    parts: tuple[ResponsePart, ...]
    role: Literal["model"] = "model"


@dataclass(frozen=True, slots=True)
class LlmResponse:
    """Generic response produced by the adapter.

    A response is either content-bearing or an error, never both. Error
    responses carry ``diagnostic``, a human readable explanation that callers
    can render in place of model output.
    """

    content: ResponseContent | None = None
    partial: bool = False
    turn_complete: bool = False
    finish_reason: str | None = None
    error_code: str | None = None
    error_message: str | None = None
    diagnostic: str | None = None

    def __post_init__(self) -> None:
        if self.error_code is not None and self.content is not None:
            raise ValueError("error responses cannot carry content")

    @property
    def is_error(self) -> bool:
        return self.error_code is not None

    def text(self) -> str:
        """Return the renderable text of the response."""

        if self.is_error:
            return self.diagnostic or self.error_message or ""
        if self.content is None:
            return ""
        return "".join(part.text for part in self.content.parts if isinstance(part, TextPart))

    def function_calls(self) -> list[FunctionCallPart]:
        if self.content is None:
            return []
        return [part for part in self.content.parts if isinstance(part, FunctionCallPart)]


# Wire shapes ---------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TextOnlyContent:
    """Message content serialised as a single string."""

    text: str


@dataclass(frozen=True, slots=True)
class MultimodalContent:
    """Message content serialised as an ordered array of typed blocks."""

    blocks: tuple[Mapping[str, Any], ...]


WireContent = TextOnlyContent | MultimodalContent


@dataclass(frozen=True, slots=True)
class WireMessage:
    role: str
    content: WireContent

    def to_payload(self) -> dict[str, Any]:
        match self.content:
            case TextOnlyContent(text=text):
                content: Any = text
            case MultimodalContent(blocks=blocks):
                content = [dict(block) for block in blocks]
        return {"role": self.role, "content": content}


@dataclass(frozen=True, slots=True)
class WireRequest:
    """Chat-completions request body sent to the gateway."""

    model: str
    messages: tuple[WireMessage, ...]
    stream: bool
    temperature: float | None = None
    max_tokens: int | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [message.to_payload() for message in self.messages],
            "stream": self.stream,
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens
        return payload


@dataclass(frozen=True, slots=True)
class StreamDelta:
    """Incremental content extracted from one streaming event."""

    content: str | None = None
    tool_calls: Sequence[Any] | None = None


@dataclass(frozen=True, slots=True)
class CompleteMessage:
    """Message extracted from a complete (non-streaming) response body."""

    content: str | None = None
    tool_calls: Sequence[Any] | None = None
    finish_reason: str | None = None
    finish_reason_null: bool = False


GatewayMessage = StreamDelta | CompleteMessage


__all__ = (
    "CompleteMessage",
    "ConversationTurn",
    "FunctionCallPart",
    "GatewayMessage",
    "GenerationConfig",
    "InlineMediaPart",
    "LlmRequest",
    "LlmResponse",
    "MultimodalContent",
    "Part",
    "ResponseContent",
    "ResponsePart",
    "StreamDelta",
    "TextOnlyContent",
    "TextPart",
    "WireContent",
    "WireMessage",
    "WireRequest",
)

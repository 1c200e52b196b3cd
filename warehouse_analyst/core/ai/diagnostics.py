"""Diagnostics collaborators receiving request/response events from the adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DiagnosticEvent:
    """A named diagnostic emitted by the adapter."""

    name: str
    fields: Mapping[str, Any] = field(default_factory=dict)


@runtime_checkable
class Diagnostics(Protocol):
    """Sink for adapter diagnostic events."""

    def record(self, event: DiagnosticEvent) -> None:
        """Record *event*."""


class LoggingDiagnostics:
    """Emit diagnostic events through :mod:`logging` as LLM category records."""

    _ERROR_EVENTS = frozenset({"llm.http_error", "llm.transport_error"})

    def __init__(self, log: logging.Logger | None = None, *, component: str = "LiteLlmAdapter") -> None:
        self._logger = log or logger
        self._component = component

    def record(self, event: DiagnosticEvent) -> None:
        level = logging.ERROR if event.name in self._ERROR_EVENTS else logging.INFO
        extra = {
            "log_type": "LLM",
            "component": self._component,
            "metadata": dict(event.fields),
        }
        self._logger.log(level, event.name, extra=extra)


class NullDiagnostics:
    """Discard all diagnostic events."""

    def record(self, event: DiagnosticEvent) -> None:
        return None


class RecordingDiagnostics:
    """Keep diagnostic events in memory."""

    def __init__(self) -> None:
        self.events: list[DiagnosticEvent] = []

    def record(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        return [event.name for event in self.events]


__all__ = (
    "DiagnosticEvent",
    "Diagnostics",
    "LoggingDiagnostics",
    "NullDiagnostics",
    "RecordingDiagnostics",
)

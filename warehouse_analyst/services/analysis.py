"""Floor-plan analysis against a KPI description."""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from ..core.ai.providers.litellm import LiteLlmAdapter
from ..core.ai.service import collect_text
from ..core.ai.types import ConversationTurn, InlineMediaPart, LlmRequest, TextPart

__all__ = [
    "AnalysisResult",
    "AnalysisService",
    "ProviderSummary",
    "SYSTEM_PROMPT",
    "build_prompt",
    "detect_mime",
    "merge_report",
]

logger = logging.getLogger(__name__)

PROVIDER_NAME = "litellm"
SYSTEM_PROMPT = (
    "You are an expert in warehouse operations and layout optimization. "
    "Provide concise, actionable insights."
)
EMPTY_REPORT = "No analysis available."

_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


@dataclass(slots=True)
class ProviderSummary:
    provider: str
    content: str
    model: str | None = None


@dataclass(slots=True)
class AnalysisResult:
    provider_summaries: list[ProviderSummary] = field(default_factory=list)
    merged_report: str = EMPTY_REPORT


def detect_mime(path: Path | str) -> str:
    """Guess the image MIME type from the file extension."""

    return _MIME_TYPES.get(Path(path).suffix.lower(), "application/octet-stream")


def build_prompt(kpi: str) -> str:
    user_prompt = (
        "Analyze this warehouse floor plan image and propose improvements to maximize "
        f'the KPI: "{kpi}". Return prioritized recommendations and any layout changes.'
    )
    return f"{SYSTEM_PROMPT}\n{user_prompt}\nFormat the response as plain text recommendations."


def merge_report(summaries: Sequence[ProviderSummary]) -> str:
    blocks = []
    for index, summary in enumerate(summaries, start=1):
        label = f"{summary.provider}:{summary.model}" if summary.model else summary.provider
        blocks.append(f"Provider #{index} ({label})\n{summary.content}")
    return "\n\n".join(blocks) or EMPTY_REPORT


class AnalysisService:
    """Run a floor-plan image and KPI description through the LLM gateway."""

    def __init__(self, adapter: LiteLlmAdapter, *, model: str | None = None) -> None:
        self._adapter = adapter
        self._model = model or adapter.model

    @property
    def model(self) -> str:
        return self._model

    async def analyze(self, image_path: Path, kpi: str) -> AnalysisResult:
        image_bytes = await asyncio.to_thread(Path(image_path).read_bytes)
        request = LlmRequest(
            contents=(
                ConversationTurn.of(
                    "user",
                    TextPart(build_prompt(kpi)),
                    InlineMediaPart(
                        mime_type=detect_mime(image_path),
                        data=base64.b64encode(image_bytes).decode("ascii"),
                    ),
                ),
            )
        )

        started = time.perf_counter()
        async with self._adapter.invoke(request, self._model, stream=False) as responses:
            content = await collect_text(responses)
        logger.info(
            "analysis.completed",
            extra={
                "log_type": "APP",
                "metadata": {
                    "model": self._model,
                    "image_bytes": len(image_bytes),
                    "duration": time.perf_counter() - started,
                },
            },
        )

        summaries = [ProviderSummary(provider=PROVIDER_NAME, model=self._model, content=content)]
        return AnalysisResult(provider_summaries=summaries, merged_report=merge_report(summaries))

"""Schemas for the floor-plan analysis and gateway debug endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .upload import UploadedFileInfo


class ProviderSummary(BaseModel):
    provider: str = Field(..., description="Provider that produced the summary")
    model: str | None = Field(default=None, description="Model used by the provider")
    content: str = Field(..., description="Analysis text returned by the provider")


class AnalysisResponse(BaseModel):
    """Result of analysing an uploaded floor plan against a KPI."""

    merged_report: str = Field(..., description="All provider summaries merged into one report")
    provider_summaries: list[ProviderSummary] = Field(default_factory=list)
    uploaded: UploadedFileInfo | None = Field(
        default=None, description="Floor-plan image stored for the request"
    )


class FunctionCallInfo(BaseModel):
    name: str
    args: dict[str, Any] = Field(default_factory=dict)


class GatewayTestResponse(BaseModel):
    """Outcome of a round trip through the LLM gateway."""

    base_url: str = Field(..., description="Gateway base URL the request was sent to")
    model: str = Field(..., description="Model requested from the gateway")
    request_preview: dict[str, Any] = Field(
        ..., description="Redacted chat-completions body that was sent"
    )
    text: str = Field(..., description="Text rendered from the gateway response")
    function_calls: list[FunctionCallInfo] = Field(default_factory=list)
    finish_reason: str | None = None
    error_code: str | None = None
    error_message: str | None = None

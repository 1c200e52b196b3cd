"""Liveness endpoint reporting whether the LLM gateway is configured."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...core.ai.service import build_gateway_settings
from ...core.settings import Settings, get_settings
from ...models.common import ResponseEnvelope

router = APIRouter(tags=["health"])


class HealthStatus(BaseModel):
    status: str = Field(..., description="'ok', or 'degraded' when analysis cannot run")
    service: str
    version: str
    gateway_configured: bool = Field(
        ..., description="True when a LiteLLM base URL and API key are set"
    )
    model: str = Field(..., description="Model requested from the gateway")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


@router.get("/health", response_model=ResponseEnvelope[HealthStatus], summary="Service health status")
async def health_check(
    settings: Settings = Depends(get_settings),
) -> ResponseEnvelope[HealthStatus]:
    gateway = build_gateway_settings(settings)
    payload = HealthStatus(
        status="ok" if gateway.is_configured else "degraded",
        service=settings.app_name,
        version=settings.app_version,
        gateway_configured=gateway.is_configured,
        model=gateway.model,
    )
    return ResponseEnvelope.success_payload(payload)

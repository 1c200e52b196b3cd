"""Envelope shared by every JSON endpoint."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorDetail(BaseModel):
    code: str = Field(..., description="Stable identifier such as 'upload_too_large'")
    message: str = Field(..., description="Explanation suitable for showing to a user")
    details: dict[str, Any] | None = None


class ResponseEnvelope(BaseModel, Generic[T]):
    """Either ``data`` (on success) or ``error`` (on failure), plus a timestamp."""

    success: bool = True
    data: T | None = None
    error: ErrorDetail | None = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def success_payload(cls, data: T | None = None) -> "ResponseEnvelope[T]":
        return cls(data=data)

    @classmethod
    def error_payload(
        cls, code: str, message: str, details: dict[str, Any] | None = None
    ) -> "ResponseEnvelope[Any]":
        return cls(
            success=False,
            error=ErrorDetail(code=code, message=message, details=details),
        )

"""Helpers shared by the route modules."""

from __future__ import annotations

from fastapi.responses import JSONResponse

from ..models.common import ResponseEnvelope


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    envelope = ResponseEnvelope.error_payload(code=code, message=message)
    return JSONResponse(status_code=status_code, content=envelope.model_dump(mode="json"))


__all__ = ("error_response",)

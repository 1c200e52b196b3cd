"""Shared Pydantic models used across the application."""

from .analysis import AnalysisResponse, FunctionCallInfo, GatewayTestResponse, ProviderSummary
from .common import ErrorDetail, ResponseEnvelope
from .upload import UploadedFileInfo

__all__ = (
    "AnalysisResponse",
    "ErrorDetail",
    "FunctionCallInfo",
    "GatewayTestResponse",
    "ProviderSummary",
    "ResponseEnvelope",
    "UploadedFileInfo",
)

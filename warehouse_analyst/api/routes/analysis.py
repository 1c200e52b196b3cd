"""Floor-plan analysis endpoint."""

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse

from ...core.ai import LiteLlmAdapter, ProviderConfigurationError, get_llm_adapter
from ...core.settings import Settings, get_settings
from ...core.uploads import UploadTooLargeError, save_upload
from ...models.analysis import AnalysisResponse, ProviderSummary
from ...models.common import ResponseEnvelope
from ...services.analysis import AnalysisService
from ..responses import error_response
from .upload import uploaded_file_info

router = APIRouter(tags=["analysis"])
logger = logging.getLogger(__name__)


def get_adapter_factory() -> Callable[[], LiteLlmAdapter]:
    """Return the callable used to obtain the gateway adapter.

    The adapter is resolved lazily inside the route so a missing gateway
    configuration can be reported as a regular error response.
    """

    return get_llm_adapter


@router.post(
    "/analysis",
    response_model=ResponseEnvelope[AnalysisResponse],
    summary="Analyse a warehouse floor plan against a KPI",
)
async def analyze_floor_plan(
    image: UploadFile | None = File(default=None, description="Warehouse floor-plan image"),
    kpi: UploadFile | None = File(default=None, description="KPI definition (CSV or text)"),
    settings: Settings = Depends(get_settings),
    adapter_factory: Callable[[], LiteLlmAdapter] = Depends(get_adapter_factory),
) -> ResponseEnvelope[AnalysisResponse] | JSONResponse:
    if image is None:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "missing_image",
            'Missing image file. Send multipart/form-data with an "image" field.',
        )
    if kpi is None:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "missing_kpi",
            'Missing KPI file. Send multipart/form-data with a "kpi" field.',
        )

    try:
        adapter = adapter_factory()
    except ProviderConfigurationError as exc:
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE, "provider_not_configured", str(exc)
        )

    try:
        saved = await save_upload(
            image, settings.paths.upload_dir, max_bytes=settings.max_upload_bytes
        )
    except UploadTooLargeError as exc:
        return error_response(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "upload_too_large", str(exc)
        )

    try:
        kpi_content = (await kpi.read()).decode("utf-8", errors="replace")
    finally:
        await kpi.close()

    logger.info(
        "analysis.requested",
        extra={"metadata": {"image": saved.filename, "kpi_length": len(kpi_content)}},
    )
    result = await AnalysisService(adapter).analyze(saved.saved_path, kpi_content)

    payload = AnalysisResponse(
        merged_report=result.merged_report,
        provider_summaries=[
            ProviderSummary(provider=item.provider, model=item.model, content=item.content)
            for item in result.provider_summaries
        ],
        uploaded=uploaded_file_info(saved),
    )
    return ResponseEnvelope.success_payload(payload)

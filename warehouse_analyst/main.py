"""Application entrypoint for the FastAPI service."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import register_routers
from .core.ai import get_llm_adapter
from .core.logging_config import configure_logging
from .core.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_application(settings: Settings | None = None) -> FastAPI:
    """Construct and configure the FastAPI application instance."""

    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        _on_startup(settings)
        try:
            yield
        finally:
            await _on_shutdown()

    application = FastAPI(
        title=settings.app_name, version=settings.app_version, lifespan=lifespan
    )
    _configure_cors(application, settings.allowed_origins)

    register_routers(application, settings.paths.upload_dir)

    return application


def _configure_cors(app: FastAPI, origins: Sequence[str] | None) -> None:
    allow_all = not origins
    allow_list = ["*"] if allow_all else list(origins or [])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _on_startup(settings: Settings) -> None:
    settings.ensure_directories()
    logger.info(
        "app.started",
        extra={
            "log_type": "SYSTEM",
            "metadata": {
                "environment": settings.environment,
                "upload_dir": str(settings.paths.upload_dir),
                "gateway_configured": bool(
                    settings.litellm_base_url and settings.litellm_api_key
                ),
            },
        },
    )


async def _on_shutdown() -> None:
    if get_llm_adapter.cache_info().currsize:
        await get_llm_adapter().aclose()
        get_llm_adapter.cache_clear()


app = create_application()

__all__ = ("app", "create_application")

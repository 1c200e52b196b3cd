"""Route registration and the static mount serving stored uploads."""

from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .routes import analysis, debug, health, upload

_ROUTERS = (
    health.router,
    upload.router,
    analysis.router,
    debug.router,
)


def register_routers(app: FastAPI, upload_dir: Path) -> None:
    """Attach the JSON routers and serve *upload_dir* under ``/uploads``."""

    for router in _ROUTERS:
        app.include_router(router)
    app.mount(
        upload.UPLOADS_URL_PREFIX,
        StaticFiles(directory=upload_dir, check_dir=False),
        name="uploads",
    )


__all__ = ("register_routers",)

"""Run the API with ``python -m warehouse_analyst`` or the ``warehouse-analyst`` script."""

from __future__ import annotations

import uvicorn

from .core.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "warehouse_analyst.main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
        # Keep the dictConfig installed by create_application.
        log_config=None,
    )


if __name__ == "__main__":
    main()

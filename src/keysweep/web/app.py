"""FastAPI application factory for the keysweep web API."""

from __future__ import annotations

from fastapi import FastAPI

from keysweep import __version__
from keysweep.config import KeySweepConfig
from keysweep.session.manager import ScanService


def create_app(
    config: KeySweepConfig | None = None,
    service: ScanService | None = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or KeySweepConfig.load()

    app = FastAPI(
        title="keysweep",
        version=__version__,
        docs_url="/api/docs",
    )

    # One scan service for the life of the process, shared by all requests
    app.state.config = config
    app.state.scan_service = service or ScanService(config)

    from keysweep.web.api.scans import router as scans_router

    app.include_router(scans_router, prefix="/api")

    @app.on_event("shutdown")
    async def shutdown() -> None:
        app.state.scan_service.close()

    return app

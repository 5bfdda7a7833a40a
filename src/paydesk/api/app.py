"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from paydesk.api.routes import admin, health, payslips
from paydesk.core.config import AppSettings
from paydesk.core.exceptions import EmployeeNotFoundError, RecordNotFoundError
from paydesk.core.logging_config import configure_logging
from paydesk.services.pipeline import PayslipPipeline


def create_app(pipeline: PayslipPipeline | None = None, settings: AppSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    A prebuilt ``pipeline`` (e.g. over in-memory backends) skips the
    settings-driven wiring.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize and tear down application resources."""
        app_settings = settings or AppSettings()
        configure_logging(app_settings.log_level, json_format=app_settings.log_format == "json")
        app.state.settings = app_settings
        app.state.pipeline = pipeline or PayslipPipeline.from_settings(app_settings)
        yield

    app = FastAPI(
        title="PayDesk Payslip Dispatch",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(payslips.router, prefix="/payslips")
    app.include_router(admin.router, prefix="/admin")

    @app.exception_handler(RecordNotFoundError)
    @app.exception_handler(EmployeeNotFoundError)
    async def not_found(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    return app

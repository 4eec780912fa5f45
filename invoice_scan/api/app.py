"""
FastAPI application for the invoice scan service.

Endpoints:
- Invoice upload, listing, lookup, edit and delete
- Inline extraction preview
- Health check
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from invoice_scan.api.errors import register_exception_handlers
from invoice_scan.api.routes import extract, health, invoices
from invoice_scan.config.settings import Settings
from invoice_scan.invoices.service import InvoiceService
from invoice_scan.storage.local_storage import URL_PREFIX
from invoice_scan.worker.launcher import BaseTaskLauncher

API_VERSION = "0.1.0"


def create_app(
    settings: Settings,
    service: InvoiceService,
    launcher: BaseTaskLauncher | None = None,
) -> FastAPI:
    """Build the FastAPI app around an already wired InvoiceService.

    On shutdown the app waits up to ``settings.shutdown_grace_seconds`` for
    background extractions started through ``launcher``.
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if launcher is not None:
            await run_in_threadpool(launcher.shutdown, settings.shutdown_grace_seconds)

    app = FastAPI(
        title="Invoice Scan API",
        description="Upload invoice images and track their AI extraction.",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.invoice_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD"],
        allow_headers=["*"],
        expose_headers=["Content-Length", "Content-Type"],
        max_age=12 * 60 * 60,
    )
    register_exception_handlers(app)

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(invoices.router, prefix=settings.api_prefix)
    app.include_router(extract.router, prefix=settings.api_prefix)
    app.mount(URL_PREFIX, StaticFiles(directory=settings.upload_path), name="uploads")
    return app

import uvicorn
from fastapi import FastAPI

from invoice_scan.api.app import create_app
from invoice_scan.config.settings import Settings
from invoice_scan.database.connection import apply_schema, close_pool, init_pool
from invoice_scan.database.repositories.factory import InvoiceRepositoryFactory
from invoice_scan.extraction.factory import ExtractionClientFactory
from invoice_scan.invoices.service import InvoiceService
from invoice_scan.logging.logger import Log
from invoice_scan.storage.local_storage import LocalFileStorage
from invoice_scan.worker.launcher import ThreadTaskLauncher


def build_app(settings: Settings) -> FastAPI:
    """Wire storage, record store, extractor and launcher into the HTTP app."""
    storage = LocalFileStorage(settings.upload_path, settings.public_base_url)
    repo = InvoiceRepositoryFactory.create(settings)
    extractor = ExtractionClientFactory.create(settings)
    launcher = ThreadTaskLauncher()
    service = InvoiceService(
        repo=repo,
        storage=storage,
        extractor=extractor,
        launcher=launcher,
        max_upload_size_bytes=settings.max_upload_size_bytes,
    )
    return create_app(settings, service, launcher)


def main() -> None:
    """Entry point: load settings -> initialize pool -> build app -> serve."""
    settings = Settings()
    Log.configure(settings.log_level)

    uses_postgres = settings.record_store.lower() == "postgres"
    if uses_postgres:
        init_pool(settings)

    try:
        if uses_postgres and settings.db_create_schema:
            apply_schema()
        app = build_app(settings)
        Log.info(
            f"Server starting on http://{settings.server_host}:{settings.server_port} "
            f"(record store: {settings.record_store}, "
            f"extraction provider: {settings.extraction_provider})"
        )
        uvicorn.run(
            app,
            host=settings.server_host,
            port=settings.server_port,
            log_level=settings.log_level.lower(),
            log_config=None,
        )
    finally:
        close_pool()
        Log.info("Server exited")


if __name__ == "__main__":
    main()

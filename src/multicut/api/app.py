"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from multicut.api.middleware import multicut_error_handler
from multicut.api.routes import exports
from multicut.config import Settings, get_settings
from multicut.models.errors import MulticutError
from multicut.storage.job_store import FileJobStore, JobStore
from multicut.worker import build_scheduler

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Optionally run the export worker inside the API process."""
    scheduler = None
    if app.state.settings.run_worker_in_api:
        scheduler = build_scheduler(app.state.settings, app.state.job_store)
        scheduler.start()
        logger.info("Embedded export worker started")
    try:
        yield
    finally:
        if scheduler:
            scheduler.stop()


def create_app(settings: Settings | None = None, store: JobStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    app = FastAPI(
        title="Multicut Export",
        description="Segment cut-and-concat export jobs for the multicam editor",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.job_store = store or FileJobStore(settings.exports_dir)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handlers
    app.add_exception_handler(MulticutError, multicut_error_handler)

    # Routes
    app.include_router(exports.router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": VERSION}

    return app


def serve() -> None:
    """Run the API under uvicorn using the configured bind address."""
    import uvicorn

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(f"Serving export API on {settings.api_host}:{settings.api_port}")
    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.api_port)


app = create_app()

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging

from docvid import __version__, settings
from docvid.utils.upload_store import ensure_directories
from .dependencies import close_composer
from .routes import health, upload
from .exceptions import (
    APIException,
    api_exception_handler,
    http_exception_handler,
    request_validation_handler,
    general_exception_handler,
)
from .middleware import LoggingMiddleware
from .static import ProcessedFiles

logging.basicConfig(level=settings.get_log_level())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("docvid API starting up...")
    logger.info(f"Config sources: {settings.get_config_sources()}")
    overridden = settings.get_overridden_keys()
    if overridden:
        logger.info(f"Environment overrides: {overridden}")
    logger.info(
        f"Config: wrap_width={settings.get_wrap_width()}, "
        f"background_required={settings.is_background_required()}, "
        f"escape_profile={settings.get_escape_profile()}, "
        f"max_concurrent_jobs={settings.get_max_concurrent_jobs() or 'unlimited'}"
    )

    yield

    close_composer()
    logger.info("docvid API shutdown complete")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="docvid API",
        description="Doctor promo video composition API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # Staging and output directories must exist before the static mount
    ensure_directories()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(LoggingMiddleware)

    app.mount(
        upload.PROCESSED_URL_PREFIX,
        ProcessedFiles(directory=str(settings.get_processed_dir())),
        name="processed",
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(upload.router, tags=["upload"])

    @app.get("/")
    async def root():
        """API root endpoint."""
        return {
            "message": "docvid API",
            "version": __version__,
            "docs": "/docs",
            "upload": "/upload",
        }

    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    return app


# Create app instance
app = create_app()

# Allow running with: python -m docvid.api.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("docvid.api.main:app", host=settings.get_server_host(), port=settings.get_server_port())

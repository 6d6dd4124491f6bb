# Top imports
import uvicorn
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from tortoise.exceptions import BaseORMException

from app.config import Settings, settings
from app.core.errors import AppError
from app.core.middleware import ErrorEnvelopeMiddleware
from app.db import Database
from app.routers import build_router
from app.schemas.common import describe_errors
from app.services.metrics import metrics_endpoint, metrics_middleware
from app.services.observability import init_observability
from app.services.storage import MEDIA_PATH, LocalStorage, ObjectStorage, build_storage

# Logging setup
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("app")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
        else:
            logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error(400, describe_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(BaseORMException)
    async def orm_error_handler(request: Request, exc: BaseORMException):
        logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error(500, "Database operation failed")


def create_app(
    config: Settings = settings,
    database: Optional[Database] = None,
    storage: Optional[ObjectStorage] = None,
) -> FastAPI:
    """Build the API. Tests pass their own database and storage."""
    database = database or Database(config.DATABASE_URL, config.DB_POOL_SIZE)
    storage = storage or build_storage(config)

    # Modern lifespan context manager
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("Starting fan-site API (%s)...", config.APP_ENV)
        init_observability(config.SENTRY_DSN, config.APP_ENV)
        await database.init()
        yield
        # Shutdown
        logger.info("Shutting down fan-site API...")
        await database.close()

    app = FastAPI(
        title="Fan Site API",
        description="Content management API for the fan site: albums, videos, notices, schedules, members, gallery and site settings",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.database = database
    app.state.storage = storage

    _install_error_handlers(app)

    # Middleware setup
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(ErrorEnvelopeMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    metrics_middleware(app, config.METRICS_ENABLED)

    app.include_router(build_router())
    logger.info("Registered routes count: %s", len(app.routes))

    if isinstance(storage, LocalStorage):
        app.mount(MEDIA_PATH, StaticFiles(directory=str(storage.base), check_dir=False), name="media")

    @app.get("/metrics", include_in_schema=False)
    async def prometheus_metrics():
        return await metrics_endpoint(config.METRICS_ENABLED)

    # Universal health endpoint (always present)
    @app.get("/health")
    async def health():
        return {"status": "OK"}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT)

from contextlib import asynccontextmanager
import json
import logging
import traceback
from typing import Optional

from fastapi import FastAPI, Request, status, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .routes.agents import router as agents_router
from .routes.catalog import router as catalog_router
from .routes.health import router as health_router
from .routes.tools import router as tools_router
from .services.backend import BackendClient
from .services.catalog import CatalogLoader
from .utils.http_client import HttpClient
from .utils.logging_middleware import LoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    loader: CatalogLoader = app.state.catalog_loader

    catalog = await loader.refresh()
    logger.info("Tool catalog ready: %d tools (%d from backend)", len(catalog), loader.last_dynamic_count)
    if settings.catalog_refresh_interval > 0:
        loader.start_periodic_refresh(interval_seconds=settings.catalog_refresh_interval)

    yield

    await loader.stop_periodic_refresh()
    await app.state.backend.close()
    await HttpClient.close_all()


def create_app(settings: Optional[Settings] = None, backend: Optional[BackendClient] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    app = FastAPI(
        title="WebTools",
        lifespan=lifespan,
        redirect_slashes=False,
    )

    backend = backend or BackendClient.from_settings(settings)
    app.state.settings = settings
    app.state.backend = backend
    app.state.catalog_loader = CatalogLoader.from_settings(settings, backend)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.error("Request validation error: %s", json.dumps(exc.errors(), default=str))
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": json.loads(json.dumps(exc.errors(), default=str))},
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        if isinstance(exc.detail, dict) and "error" in exc.detail:
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.detail,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Global Unhandled Exception on {request.url.path}: {exc}")
        logger.error(traceback.format_exc())

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal Server Error",
                "error": {
                    "code": "internal_error",
                    "message": "An unexpected error occurred."
                }
            }
        )

    # Only add CORS middleware if origins are configured
    # If empty, assume a reverse proxy handles CORS
    if settings.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_middleware(LoggingMiddleware)

    app.include_router(health_router, tags=["Monitoring"])
    app.include_router(agents_router, prefix="/api", tags=["Agents"])
    app.include_router(tools_router, prefix="/api", tags=["Tools"])
    app.include_router(catalog_router, prefix="/api", tags=["Catalog"])

    return app


# Uvicorn Entry
app = create_app()

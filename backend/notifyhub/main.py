"""Main FastAPI application for the notification bookkeeping server."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings, get_cors_origins
from .errors import NotifyHubError
from .routers import (
    devices_router,
    broadcast_devices_router,
    messages_router,
    broadcasts_router,
    users_router,
    health_router,
)
from .storage import BaseStorage, create_storage

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    storage: BaseStorage = app.state.storage
    logger.info(f"Starting NotifyHub with {storage.mode.upper()} storage")

    # A storage that cannot be initialized aborts startup
    await storage.initialize()
    logger.info("Storage initialized")

    yield

    await storage.close()
    logger.info("Shutdown complete")


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


def register_exception_handlers(app: FastAPI):
    """Render every error as {"error": message}."""

    @app.exception_handler(NotifyHubError)
    async def notifyhub_error_handler(request: Request, exc: NotifyHubError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
            return JSONResponse(status_code=exc.status_code, content={"error": "Internal server error"})
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": _format_validation_errors(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # A known path with an unsupported verb is treated like an unknown route
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content={"error": "Not found", "path": request.url.path, "method": request.method},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unexpected error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(config: Settings | None = None, storage: BaseStorage | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings to use instead of the environment-derived ones
        storage: Storage backend to use instead of the one STORAGE_MODE selects
    """
    config = config or settings

    app = FastAPI(
        title="NotifyHub",
        description="Push notification bookkeeping - devices, messages, broadcasts and receipts",
        version=config.server_version,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.storage = storage or create_storage(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(config),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(devices_router)
    app.include_router(broadcast_devices_router)
    app.include_router(messages_router)
    app.include_router(broadcasts_router)
    app.include_router(users_router)
    app.include_router(health_router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Notification server running at http://localhost:{settings.web_port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.web_port)

"""
FastAPI application entry point for the WOPI host
"""
from fastapi import FastAPI
from contextlib import asynccontextmanager
import uvicorn
import logging

from wopi_host.contexts.wopi.api.dto import HealthResponse
from wopi_host.contexts.wopi.api.endpoints import router as wopi_router
from wopi_host.contexts.wopi.api.error_handlers import (
    WOPIError,
    wopi_error_handler,
    generic_error_handler
)
from wopi_host.contexts.wopi.infrastructure.config import settings
from wopi_host.contexts.wopi.infrastructure.dependencies import cleanup_services
from wopi_host.contexts.wopi.infrastructure.structured_logger import LoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle events
    """
    logger.info(
        f"Starting {settings.service_name} "
        f"(tokens={settings.token_backend}, repository={settings.repository_backend})"
    )

    yield

    await cleanup_services()
    logger.info(f"{settings.service_name} stopped")


def create_app() -> FastAPI:
    """Build the WOPI host application."""
    app = FastAPI(
        title="WOPI Host",
        description="WOPI CheckFileInfo endpoint for online document editing",
        version=settings.version,
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    app.include_router(wopi_router)

    app.add_exception_handler(WOPIError, wopi_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint for Docker and monitoring"""
        return {
            "status": "healthy",
            "service": settings.service_name,
            "version": settings.version
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "wopi_host.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )

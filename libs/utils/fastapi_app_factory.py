"""FastAPI application factory with common configurations."""

from contextlib import asynccontextmanager
from typing import Optional, Callable, Awaitable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from libs.utils.logging_config import get_logger
from libs.utils.middleware import RequestLoggingMiddleware

logger = get_logger(__name__)


def create_lifespan_manager(
    service_name: str,
    startup_hook: Optional[Callable[[FastAPI], Awaitable[None]]] = None,
    shutdown_hook: Optional[Callable[[FastAPI], Awaitable[None]]] = None,
):
    """Create a standardized lifespan manager for FastAPI apps."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting service", service=service_name)

        if startup_hook:
            await startup_hook(app)

        try:
            yield
        finally:
            logger.info("Shutting down service", service=service_name)

            if shutdown_hook:
                await shutdown_hook(app)

    return lifespan


def create_fastapi_app(
    title: str,
    description: str,
    version: str,
    service_name: str,
    startup_hook: Optional[Callable[[FastAPI], Awaitable[None]]] = None,
    shutdown_hook: Optional[Callable[[FastAPI], Awaitable[None]]] = None,
    cors_origins: Optional[list] = None,
) -> FastAPI:
    """Create a FastAPI application with standard configuration.

    Logging must already be configured by the caller; the factory only wires
    the lifespan hooks, CORS and request logging middleware.
    """
    app = FastAPI(
        title=title,
        description=description,
        version=version,
        lifespan=create_lifespan_manager(
            service_name=service_name,
            startup_hook=startup_hook,
            shutdown_hook=shutdown_hook,
        ),
    )

    if cors_origins is None:
        cors_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    return app

"""Utility modules shared by the orchestrator services."""

from libs.utils.fastapi_app_factory import create_fastapi_app, create_lifespan_manager
from libs.utils.logging_config import configure_structured_logging, get_logger
from libs.utils.middleware import RequestLoggingMiddleware

__all__ = [
    "create_fastapi_app",
    "create_lifespan_manager",
    "configure_structured_logging",
    "get_logger",
    "RequestLoggingMiddleware",
]

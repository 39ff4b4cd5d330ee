"""Custom middleware for the orchestrator HTTP surface."""

import time
import uuid
from typing import Callable, Iterable, Optional

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
DEFAULT_QUIET_PATHS = ("/health", "/metrics")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Binds a request id into the structlog context and logs each request.

    The caller's ``X-Request-ID`` is reused when present so a task can be
    followed across workers. Probe and scrape paths log at debug level.
    """

    def __init__(self, app: ASGIApp, quiet_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        self.quiet_paths = frozenset(DEFAULT_QUIET_PATHS if quiet_paths is None else quiet_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        log = logger.debug if request.url.path in self.quiet_paths else logger.info
        start_time = time.perf_counter()

        response = await call_next(request)

        log(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            client_ip=request.client.host if request.client else None,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

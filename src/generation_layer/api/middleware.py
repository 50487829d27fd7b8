"""FastAPI middleware for request tracing and logging."""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Logged only when the response is an error
QUIET_PATHS = frozenset({"/metrics", "/health"})


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Bind a request id to every log line of a request.

    - Reuses the client's X-Request-ID when present, otherwise a UUID4
    - Binds request_id, method and path to the structlog context
    - Echoes X-Request-ID on the response
    - Logs completion with status and duration (generation calls can take minutes)
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        path = request.url.path
        quiet = path in QUIET_PATHS

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=path,
        )

        if not quiet:
            logger.info(
                "Request started",
                client_host=request.client.host if request.client else None,
                content_type=request.headers.get("content-type"),
            )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request failed",
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise
        else:
            if not quiet or response.status_code >= 400:
                logger.info(
                    "Request completed",
                    status_code=response.status_code,
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            structlog.contextvars.clear_contextvars()

# =============================================================================
# Request Logging Middleware
# =============================================================================
#
# One log line per request: method, path, status code and latency.
# Health checks and the API docs are skipped to keep the log readable.
# Requests that raise are logged at ERROR and re-raised for the
# exception handlers.
# =============================================================================

from __future__ import annotations

import logging
import time

from starlette.middleware.base import (
    BaseHTTPMiddleware,
    RequestResponseEndpoint,
)
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every API request with its outcome and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            logger.error(
                "%s %s failed after %dms",
                request.method, request.url.path, elapsed_ms,
            )
            raise
        elapsed_ms = int((time.monotonic() - start_time) * 1000)

        logger.info(
            "%s %s -> %d (%dms)",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )
        return response

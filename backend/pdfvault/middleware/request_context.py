"""Request context middleware for observability.

Responsibilities (handled in one pass):
- Generate or propagate ``X-Request-ID`` header
- Measure request duration
- Log every request/response as a structured record
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..core.logging_config import request_id_var

logger = logging.getLogger(__name__)

# Health probes are logged at debug level only.
_QUIET_PATHS = frozenset({"/", "/health"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request-id propagation, timing and access logging."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        log = logger.debug if request.url.path in _QUIET_PATHS else logger.info
        log(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        return response

"""Per-request id, timing headers and one access-log line per request."""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..core.logging_config import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
RESPONSE_TIME_HEADER = "X-Response-Time"

# Probed constantly by load balancers; logged at DEBUG only.
_QUIET_PATHS = frozenset({"/health"})


def _log_level(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if path in _QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Propagate or mint ``X-Request-ID``, time the request, log the outcome.

    Share-link redirects are logged like any other request, so the access
    log doubles as a record of which share codes are being fetched.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:16]
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 1)

            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers[RESPONSE_TIME_HEADER] = f"{elapsed_ms}ms"

            path = request.url.path
            logger.log(
                _log_level(path, response.status_code),
                "%s %s -> %d",
                request.method, path, response.status_code,
                extra={
                    "method": request.method,
                    "path": path,
                    "status_code": response.status_code,
                    "duration_ms": elapsed_ms,
                    "client": request.client.host if request.client else None,
                },
            )
            return response
        finally:
            request_id_var.reset(token)
